from datetime import datetime, timedelta

import pytest

from inventory_app.core.config import ConfigurationError, Settings
from inventory_app.core.errors import StorageUnavailable, Unauthenticated
from inventory_app.core.security import require_session, sign_session_token
from inventory_app.db.models import SessionRecord
from inventory_app.db.session import SessionLocal
from inventory_app.services.sessions import (
	DatabaseSessionStore,
	MemorySessionStore,
	SessionIdentity,
	SessionManager,
	build_session_manager,
)

ALICE = SessionIdentity(user_id="u1", username="alice")


def memory_manager(**kwargs):
	return SessionManager(MemorySessionStore(), secret="s3cret", **kwargs)


def test_create_then_resolve():
	manager = memory_manager()
	cookie = manager.create(ALICE)
	assert manager.resolve(cookie) == ALICE


@pytest.mark.parametrize("cookie", [None, "", "garbage", "a.b.c"])
def test_resolve_fails_soft_on_bad_tokens(cookie):
	assert memory_manager().resolve(cookie) is None


def test_resolve_rejects_cookie_signed_with_other_secret():
	cookie = memory_manager().create(ALICE)
	other = SessionManager(MemorySessionStore(), secret="different")
	assert other.resolve(cookie) is None


def test_resolve_rejects_expired_sessions():
	manager = memory_manager(ttl=timedelta(seconds=-1))
	cookie = manager.create(ALICE)
	assert manager.resolve(cookie) is None


def test_destroy_is_idempotent():
	manager = memory_manager()
	cookie = manager.create(ALICE)

	manager.destroy(cookie)
	manager.destroy(cookie)
	manager.destroy(None)

	assert manager.resolve(cookie) is None


def test_memory_store_purges_expired_records():
	store = MemorySessionStore()
	store.set("old", ALICE.to_payload(), datetime.utcnow() - timedelta(minutes=1))
	store.set("new", ALICE.to_payload(), datetime.utcnow() + timedelta(minutes=1))

	assert store.purge_expired() == 1
	assert store.get("old") is None
	assert store.get("new") == ALICE.to_payload()


def test_create_purges_expired_records():
	manager = memory_manager()
	manager.store.set("old", ALICE.to_payload(), datetime.utcnow() - timedelta(minutes=1))

	cookie = manager.create(ALICE)

	assert "old" not in manager.store._records
	assert manager.resolve(cookie) == ALICE


def test_database_store_is_shared_between_managers():
	first = SessionManager(DatabaseSessionStore(SessionLocal), secret="s3cret")
	second = SessionManager(DatabaseSessionStore(SessionLocal), secret="s3cret")

	cookie = first.create(ALICE)
	assert second.resolve(cookie) == ALICE

	second.destroy(cookie)
	assert first.resolve(cookie) is None


def test_database_store_purges_expired_rows(db):
	store = DatabaseSessionStore(SessionLocal)
	store.set("old", ALICE.to_payload(), datetime.utcnow() - timedelta(minutes=1))
	store.set("new", ALICE.to_payload(), datetime.utcnow() + timedelta(minutes=1))

	assert store.get("old") is None
	assert store.purge_expired() == 1
	assert [row.token for row in db.query(SessionRecord).all()] == ["new"]


class BrokenStore(MemorySessionStore):
	def get(self, token):
		raise StorageUnavailable("down")

	def delete(self, token):
		raise StorageUnavailable("down")


def test_store_outage_reads_as_logged_out():
	manager = SessionManager(BrokenStore(), secret="s3cret")
	cookie = sign_session_token("tok", "s3cret", "HS256", timedelta(days=1))

	assert manager.resolve(cookie) is None
	manager.destroy(cookie)


def test_require_session_returns_identity():
	manager = memory_manager()
	cookie = manager.create(ALICE)
	assert require_session(manager, cookie) == ALICE


def test_require_session_without_session():
	with pytest.raises(Unauthenticated) as info:
		require_session(memory_manager(), None)
	assert info.value.clear_cookie is False


def test_require_session_destroys_incomplete_identity():
	manager = memory_manager()
	cookie = manager.create(SessionIdentity(user_id=None, username="ghost"))

	with pytest.raises(Unauthenticated) as info:
		require_session(manager, cookie)

	assert info.value.clear_cookie is True
	assert manager.resolve(cookie) is None


def test_attach_cookie_sets_security_attributes():
	from starlette.responses import Response

	manager = memory_manager(secure=True, same_site="strict", cookie_name="sid")
	response = Response()
	manager.attach_cookie(response, "value")

	header = response.headers["set-cookie"].lower()
	assert header.startswith("sid=value")
	assert "httponly" in header
	assert "secure" in header
	assert "samesite=strict" in header
	assert f"max-age={7 * 24 * 3600}" in header


def test_development_defaults(monkeypatch):
	monkeypatch.setenv("APP_ENV", "development")
	monkeypatch.delenv("SESSION_BACKEND", raising=False)
	monkeypatch.delenv("SESSION_COOKIE_SAMESITE", raising=False)

	manager = build_session_manager(Settings())

	assert isinstance(manager.store, MemorySessionStore)
	assert manager.secure is False
	assert manager.same_site == "lax"


def test_production_defaults(monkeypatch):
	monkeypatch.setenv("APP_ENV", "production")
	monkeypatch.setenv("SESSION_SECRET", "prod-secret")
	monkeypatch.delenv("SESSION_BACKEND", raising=False)
	monkeypatch.delenv("SESSION_COOKIE_SAMESITE", raising=False)

	manager = build_session_manager(Settings(), session_factory=SessionLocal)

	assert isinstance(manager.store, DatabaseSessionStore)
	assert manager.secure is True
	assert manager.same_site == "strict"
	assert manager.secret == "prod-secret"


def test_production_requires_a_secret(monkeypatch):
	monkeypatch.setenv("APP_ENV", "production")
	monkeypatch.delenv("SESSION_SECRET", raising=False)

	with pytest.raises(ConfigurationError):
		build_session_manager(Settings(), session_factory=SessionLocal)


def test_unknown_backend_is_rejected(monkeypatch):
	monkeypatch.setenv("SESSION_BACKEND", "redis")
	with pytest.raises(ConfigurationError):
		build_session_manager(Settings())
