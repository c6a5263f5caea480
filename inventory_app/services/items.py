from typing import List, Optional

from sqlalchemy.orm import Session

from inventory_app.core.security import is_owner
from inventory_app.db.models import Item
from inventory_app.db.session import translate_storage_errors


class ItemStore:
	"""Item persistence. Every lookup filters by item id and owner id together."""

	def __init__(self, db: Session):
		self.db = db

	def _owned(self, owner_id: str):
		return self.db.query(Item).filter(is_owner(Item.owner_id, owner_id))

	def list_for_owner(self, owner_id: str) -> List[Item]:
		with translate_storage_errors(self.db):
			return (
				self._owned(owner_id)
				.order_by(Item.date_acquired.desc(), Item.created_at.desc())
				.all()
			)

	def insert(self, item: Item) -> Item:
		with translate_storage_errors(self.db):
			self.db.add(item)
			self.db.commit()
			self.db.refresh(item)
		return item

	def find(self, owner_id: str, item_id: str) -> Optional[Item]:
		with translate_storage_errors(self.db):
			return self._owned(owner_id).filter(Item.id == item_id).first()

	def update(self, owner_id: str, item_id: str, values: dict) -> Optional[Item]:
		with translate_storage_errors(self.db):
			if values:
				matched = (
					self._owned(owner_id)
					.filter(Item.id == item_id)
					.update(values, synchronize_session=False)
				)
				self.db.commit()
				if not matched:
					return None
			item = self._owned(owner_id).filter(Item.id == item_id).first()
			if item is not None:
				self.db.refresh(item)
			return item

	def delete(self, owner_id: str, item_id: str) -> bool:
		with translate_storage_errors(self.db):
			removed = (
				self._owned(owner_id)
				.filter(Item.id == item_id)
				.delete(synchronize_session=False)
			)
			self.db.commit()
		return removed > 0
