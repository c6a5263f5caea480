import os
import tempfile
from pathlib import Path

_TMP_DIR = tempfile.mkdtemp(prefix="inventory-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["APP_ENV"] = "development"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["AUTO_LOGIN_ON_REGISTER"] = "true"

import pytest
from fastapi.testclient import TestClient

from inventory_app.db.base import Base
from inventory_app.db.models import User
from inventory_app.db.session import SessionLocal, engine
from inventory_app.main import create_app


@pytest.fixture(autouse=True)
def fresh_database():
	Base.metadata.drop_all(bind=engine)
	Base.metadata.create_all(bind=engine)
	yield


@pytest.fixture
def db():
	session = SessionLocal()
	try:
		yield session
	finally:
		session.close()


@pytest.fixture
def make_user(db):
	"""Insert a user row directly, skipping the bcrypt cost of registration."""
	def _make(username: str) -> User:
		user = User(username=username, password_hash="not-a-real-hash")
		db.add(user)
		db.commit()
		db.refresh(user)
		return user
	return _make


@pytest.fixture
def client():
	with TestClient(create_app()) as test_client:
		yield test_client


def register(client, username="alice", password="secret1"):
	return client.post(
		"/register",
		data={"username": username, "password": password},
		follow_redirects=False,
	)


def login(client, username="alice", password="secret1"):
	return client.post(
		"/login",
		data={"username": username, "password": password},
		follow_redirects=False,
	)


def add_item(client, **fields):
	return client.post("/add", data=fields, follow_redirects=False)
