import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from inventory_app.db.base import Base


def new_id() -> str:
	return uuid.uuid4().hex


class User(Base):
	__tablename__ = "users"

	id = Column(String(32), primary_key=True, default=new_id)
	username = Column(String, unique=True, index=True, nullable=False)
	password_hash = Column(String, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow)

	items = relationship("Item", back_populates="owner")

	def __repr__(self):
		return f"<User(id={self.id}, username={self.username})>"

class Item(Base):
	__tablename__ = "items"

	id = Column(String(32), primary_key=True, default=new_id)
	name = Column(String, nullable=False)
	category = Column(String, nullable=False)
	quantity = Column(Integer, nullable=False, default=0)
	date_acquired = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
	owner_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow)

	owner = relationship("User", back_populates="items")

	def __repr__(self):
		return f"<Item(id={self.id}, name={self.name}, owner_id={self.owner_id})>"

class SessionRecord(Base):
	__tablename__ = "sessions"

	token = Column(String, primary_key=True)
	data = Column(Text, nullable=False)
	expires_at = Column(DateTime, nullable=False, index=True)
