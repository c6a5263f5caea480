from pydantic import BaseModel, Field, ValidationError, validator

USERNAME_MAX_LENGTH = 64

class CredentialsForm(BaseModel):
	username: str = Field(min_length=1, max_length=USERNAME_MAX_LENGTH)
	password: str = Field(min_length=1)

	@validator("username", pre=True)
	def strip_username(cls, v):
		return (v or "").strip()

	@validator("password", pre=True)
	def password_present(cls, v):
		return v or ""

def credentials_error_message(exc: ValidationError) -> str:
	for error in exc.errors():
		field = error.get("loc", ("",))[0]
		if field == "username" and error.get("type") == "string_too_long":
			return f"Username must be at most {USERNAME_MAX_LENGTH} characters."
	return "Username and password are required."
