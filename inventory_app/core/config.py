import os
from dotenv import load_dotenv

load_dotenv()

DEV_SESSION_SECRET = "a_fallback_secret_for_dev_only"


class ConfigurationError(RuntimeError):
	pass


def _env_flag(name: str, default: str) -> bool:
	return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
	def __init__(self):
		self.APP_NAME = os.getenv("APP_NAME", "Inventory Tracker")
		self.APP_ENV = os.getenv("APP_ENV", "development").strip().lower()

		self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./inventory.db")

		self.HOST = os.getenv("HOST", "0.0.0.0")
		self.PORT = int(os.getenv("PORT", "3000"))

		self.SESSION_SECRET = os.getenv("SESSION_SECRET", "")
		self.SESSION_ALG = "HS256"
		self.SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
		self.SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "inventory.sid")
		self.SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "")
		self.SESSION_BACKEND = os.getenv("SESSION_BACKEND", "")

		self.AUTO_LOGIN_ON_REGISTER = _env_flag("AUTO_LOGIN_ON_REGISTER", "true")

		self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

	@property
	def is_production(self) -> bool:
		return self.APP_ENV == "production"

	@property
	def session_backend(self) -> str:
		if self.SESSION_BACKEND:
			return self.SESSION_BACKEND.strip().lower()
		return "database" if self.is_production else "memory"

	@property
	def cookie_same_site(self) -> str:
		if self.SESSION_COOKIE_SAMESITE:
			return self.SESSION_COOKIE_SAMESITE.strip().lower()
		return "strict" if self.is_production else "lax"

	@property
	def session_secret(self) -> str:
		# Production must never sign cookies with the shared fallback.
		if self.SESSION_SECRET:
			return self.SESSION_SECRET
		if self.is_production:
			raise ConfigurationError("SESSION_SECRET must be set in production")
		return DEV_SESSION_SECRET


settings = Settings()
