import pytest
from sqlalchemy.exc import OperationalError

from inventory_app.core.errors import DuplicateUsername, StorageUnavailable
from inventory_app.db.models import User
from inventory_app.db.session import translate_storage_errors
from inventory_app.services.credentials import CredentialStore


def test_create_hashes_password_and_finds_user(db):
	store = CredentialStore(db)
	user = store.create("alice", "secret1")

	assert user.id
	assert user.password_hash != "secret1"
	assert store.find_by_username("alice").id == user.id
	assert store.find_by_username("bob") is None


def test_same_password_gets_different_hashes(db):
	store = CredentialStore(db)
	first = store.create("alice", "secret1")
	second = store.create("bob", "secret1")
	assert first.password_hash != second.password_hash


def test_duplicate_username_creates_nothing(db):
	store = CredentialStore(db)
	store.create("alice", "secret1")

	with pytest.raises(DuplicateUsername):
		store.create("alice", "another")

	assert db.query(User).filter(User.username == "alice").count() == 1


def test_verify_and_authenticate(db):
	store = CredentialStore(db)
	user = store.create("alice", "secret1")

	assert store.verify(user, "secret1")
	assert not store.verify(user, "wrong")
	assert store.authenticate("alice", "secret1").id == user.id
	assert store.authenticate("alice", "wrong") is None
	assert store.authenticate("nobody", "secret1") is None


def test_long_passwords_are_truncated_consistently(db):
	store = CredentialStore(db)
	password = "x" * 100
	user = store.create("alice", password)
	assert store.verify(user, password)


def test_operational_errors_become_storage_unavailable(db):
	with pytest.raises(StorageUnavailable):
		with translate_storage_errors(db):
			raise OperationalError("SELECT 1", {}, Exception("database is down"))


def test_unreachable_database_fails_startup_check(monkeypatch, tmp_path):
	from sqlalchemy import create_engine

	from inventory_app.db import session as db_session

	missing = tmp_path / "missing-dir" / "inventory.db"
	monkeypatch.setattr(db_session, "engine", create_engine(f"sqlite:///{missing}"))

	with pytest.raises(StorageUnavailable):
		db_session.check_database()
