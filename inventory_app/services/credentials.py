from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_app.core.errors import DuplicateUsername
from inventory_app.core.security import burn_password_check, hash_password, verify_password
from inventory_app.db.models import User
from inventory_app.db.session import translate_storage_errors


class CredentialStore:
	def __init__(self, db: Session):
		self.db = db

	def find_by_username(self, username: str) -> Optional[User]:
		with translate_storage_errors(self.db):
			return self.db.query(User).filter(User.username == username).first()

	def create(self, username: str, password: str) -> User:
		if self.find_by_username(username) is not None:
			raise DuplicateUsername()

		user = User(username=username, password_hash=hash_password(password))
		with translate_storage_errors(self.db):
			self.db.add(user)
			try:
				self.db.commit()
			except IntegrityError as exc:
				# Lost a race with a concurrent registration of the same name.
				self.db.rollback()
				raise DuplicateUsername() from exc
			self.db.refresh(user)
		return user

	def verify(self, user: User, password: str) -> bool:
		return verify_password(password, user.password_hash)

	def authenticate(self, username: str, password: str) -> Optional[User]:
		user = self.find_by_username(username)
		if user is None:
			burn_password_check()
			return None
		if not self.verify(user, password):
			return None
		return user
