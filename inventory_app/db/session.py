from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from inventory_app.core.config import settings
from inventory_app.core.errors import StorageUnavailable

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()

@contextmanager
def translate_storage_errors(db: Session):
	try:
		yield
	except OperationalError as exc:
		db.rollback()
		raise StorageUnavailable(str(exc.orig or exc)) from exc

def check_database() -> None:
	"""Fail fast when the database cannot be reached."""
	try:
		with engine.connect() as conn:
			conn.execute(text("SELECT 1"))
	except OperationalError as exc:
		raise StorageUnavailable(f"cannot connect to {engine.url.render_as_string(hide_password=True)}") from exc
