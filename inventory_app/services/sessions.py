"""Server-side sessions behind a signed cookie.

The cookie only carries an opaque token. The identity it maps to lives in a
session store chosen at startup: process memory for a single development
process, or the ``sessions`` table so every process can resolve every session.
"""

import json
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from inventory_app.core.config import Settings
from inventory_app.core.errors import ConfigurationError, StorageUnavailable
from inventory_app.core.logging import log_event
from inventory_app.core.security import read_session_token, sign_session_token
from inventory_app.db.models import SessionRecord


@dataclass(frozen=True)
class SessionIdentity:
	user_id: Optional[str]
	username: Optional[str]

	@property
	def is_complete(self) -> bool:
		return bool(self.user_id)

	def to_payload(self) -> dict:
		return {"user": {"_id": self.user_id, "username": self.username}}

	@classmethod
	def from_payload(cls, payload: dict) -> Optional["SessionIdentity"]:
		user = payload.get("user") if isinstance(payload, dict) else None
		if not isinstance(user, dict):
			return None
		return cls(user_id=user.get("_id"), username=user.get("username"))


class MemorySessionStore:
	"""Token -> payload map local to this process."""

	def __init__(self):
		self._lock = threading.Lock()
		self._records: Dict[str, Tuple[dict, datetime]] = {}

	def get(self, token: str) -> Optional[dict]:
		with self._lock:
			record = self._records.get(token)
			if record is None:
				return None
			payload, expires_at = record
			if expires_at <= datetime.utcnow():
				del self._records[token]
				return None
			return dict(payload)

	def set(self, token: str, payload: dict, expires_at: datetime) -> None:
		with self._lock:
			self._records[token] = (dict(payload), expires_at)

	def delete(self, token: str) -> None:
		with self._lock:
			self._records.pop(token, None)

	def purge_expired(self) -> int:
		now = datetime.utcnow()
		with self._lock:
			expired = [token for token, (_, expires_at) in self._records.items() if expires_at <= now]
			for token in expired:
				del self._records[token]
		return len(expired)


class DatabaseSessionStore:
	"""Sessions persisted in the ``sessions`` table, shared by all processes."""

	def __init__(self, session_factory):
		self.session_factory = session_factory

	def _run(self, work):
		db = self.session_factory()
		try:
			result = work(db)
			db.commit()
			return result
		except SQLAlchemyError as exc:
			db.rollback()
			raise StorageUnavailable(f"session store: {exc}") from exc
		finally:
			db.close()

	def get(self, token: str) -> Optional[dict]:
		def work(db):
			row = (
				db.query(SessionRecord)
				.filter(SessionRecord.token == token)
				.filter(SessionRecord.expires_at > datetime.utcnow())
				.first()
			)
			if row is None:
				return None
			try:
				return json.loads(row.data)
			except ValueError:
				return None

		return self._run(work)

	def set(self, token: str, payload: dict, expires_at: datetime) -> None:
		def work(db):
			db.merge(SessionRecord(token=token, data=json.dumps(payload), expires_at=expires_at))

		self._run(work)

	def delete(self, token: str) -> None:
		self._run(lambda db: db.query(SessionRecord).filter(SessionRecord.token == token).delete())

	def purge_expired(self) -> int:
		return self._run(
			lambda db: db.query(SessionRecord)
			.filter(SessionRecord.expires_at <= datetime.utcnow())
			.delete(synchronize_session=False)
		)


class SessionManager:
	def __init__(
		self,
		store,
		secret: str,
		ttl: timedelta = timedelta(days=7),
		cookie_name: str = "inventory.sid",
		secure: bool = False,
		same_site: str = "lax",
		algorithm: str = "HS256",
	):
		self.store = store
		self.secret = secret
		self.ttl = ttl
		self.cookie_name = cookie_name
		self.secure = secure
		self.same_site = same_site
		self.algorithm = algorithm

	def create(self, identity: SessionIdentity) -> str:
		self.store.purge_expired()
		token = secrets.token_urlsafe(32)
		self.store.set(token, identity.to_payload(), datetime.utcnow() + self.ttl)
		return sign_session_token(token, self.secret, self.algorithm, self.ttl)

	def resolve(self, value: Optional[str]) -> Optional[SessionIdentity]:
		token = read_session_token(value, self.secret, self.algorithm)
		if token is None:
			return None
		try:
			payload = self.store.get(token)
		except StorageUnavailable as exc:
			log_event("session_store_error", level=logging.WARNING, operation="resolve", error=str(exc))
			return None
		if payload is None:
			return None
		return SessionIdentity.from_payload(payload)

	def destroy(self, value: Optional[str]) -> None:
		token = read_session_token(value, self.secret, self.algorithm)
		if token is None:
			return
		try:
			self.store.delete(token)
		except StorageUnavailable as exc:
			log_event("session_store_error", level=logging.WARNING, operation="destroy", error=str(exc))

	def attach_cookie(self, response, value: str) -> None:
		response.set_cookie(
			self.cookie_name,
			value,
			max_age=int(self.ttl.total_seconds()),
			httponly=True,
			secure=self.secure,
			samesite=self.same_site,
			path="/",
		)

	def clear_cookie(self, response) -> None:
		response.delete_cookie(
			self.cookie_name,
			path="/",
			httponly=True,
			secure=self.secure,
			samesite=self.same_site,
		)


def build_session_manager(settings: Settings, session_factory=None) -> SessionManager:
	backend = settings.session_backend
	if backend == "memory":
		store = MemorySessionStore()
	elif backend == "database":
		if session_factory is None:
			from inventory_app.db.session import SessionLocal
			session_factory = SessionLocal
		store = DatabaseSessionStore(session_factory)
	else:
		raise ConfigurationError(f"Unknown SESSION_BACKEND: {backend!r}")

	return SessionManager(
		store,
		secret=settings.session_secret,
		ttl=timedelta(days=settings.SESSION_TTL_DAYS),
		cookie_name=settings.SESSION_COOKIE_NAME,
		secure=settings.is_production,
		same_site=settings.cookie_same_site,
		algorithm=settings.SESSION_ALG,
	)
