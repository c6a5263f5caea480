from datetime import datetime, timedelta
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from inventory_app.core.errors import Unauthenticated
from inventory_app.core.logging import log_event

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def _normalize_password(password: str) -> str:
	# bcrypt only considers the first 72 bytes; truncate consistently to avoid errors.
	raw = password.encode("utf-8")
	if len(raw) <= 72:
		return password
	return raw[:72].decode("utf-8", errors="ignore")

def hash_password(password: str) -> str:
	return pwd_context.hash(_normalize_password(password))

def verify_password(password: str, password_hash: str) -> bool:
	return pwd_context.verify(_normalize_password(password), password_hash)

def burn_password_check() -> None:
	"""Spend the cost of one verify so unknown users take as long as wrong passwords."""
	pwd_context.dummy_verify()

# -------------------------
# Session cookie signing
# -------------------------
def sign_session_token(token: str, secret: str, algorithm: str, ttl: timedelta) -> str:
	now = datetime.utcnow()
	payload = {
		"sid": token,
		"iat": int(now.timestamp()),
		"exp": int((now + ttl).timestamp()),
	}
	return jwt.encode(payload, secret, algorithm=algorithm)

def read_session_token(value: Optional[str], secret: str, algorithm: str) -> Optional[str]:
	if not value:
		return None
	try:
		payload = jwt.decode(value, secret, algorithms=[algorithm])
	except JWTError:
		return None
	sid = payload.get("sid")
	if not isinstance(sid, str) or not sid:
		return None
	return sid

# -------------------------
# Authorization guard
# -------------------------
def is_owner(resource_owner_id, session_user_id):
	"""
	The one ownership rule: a resource belongs to the session user when the ids match.

	Given plain values this returns a bool; given a SQLAlchemy column it returns
	the filter clause, which is how owner-scoped queries are built.
	"""
	return resource_owner_id == session_user_id

def require_session(manager, token: Optional[str]):
	identity = manager.resolve(token)
	if identity is None:
		raise Unauthenticated()
	if not identity.is_complete:
		# Half-valid session: drop it so the client cannot present it again.
		manager.destroy(token)
		log_event("session_incomplete", username=identity.username)
		raise Unauthenticated(clear_cookie=True)
	return identity

def _session_cookie(request: Request) -> Optional[str]:
	manager = request.app.state.sessions
	return request.cookies.get(manager.cookie_name)

def current_identity(request: Request):
	return require_session(request.app.state.sessions, _session_cookie(request))

def optional_identity(request: Request):
	identity = request.app.state.sessions.resolve(_session_cookie(request))
	if identity is None or not identity.is_complete:
		return None
	return identity
