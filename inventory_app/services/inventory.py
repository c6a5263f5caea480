from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from inventory_app.core.errors import ValidationError
from inventory_app.core.validation import clean_text, coerce_quantity, parse_acquired_date
from inventory_app.db.models import Item
from inventory_app.services.items import ItemStore


@dataclass
class InventoryStats:
	total_items: int = 0
	total_quantity: int = 0
	category_count: Dict[str, int] = field(default_factory=dict)


def summarize(items: Iterable[Item]) -> InventoryStats:
	items = list(items)
	return InventoryStats(
		total_items=len(items),
		total_quantity=sum(item.quantity or 0 for item in items),
		category_count=dict(Counter(item.category for item in items)),
	)


def _required_text(value, label: str, field_name: str) -> str:
	text = clean_text(value)
	if not text:
		raise ValidationError(f"{label} is required.", field=field_name)
	return text


class InventoryService:
	def __init__(self, db: Session):
		self.store = ItemStore(db)

	def list(self, owner_id: str) -> List[Item]:
		return self.store.list_for_owner(owner_id)

	def add(
		self,
		owner_id: str,
		name,
		category,
		quantity=None,
		date_acquired=None,
	) -> Item:
		item = Item(
			name=_required_text(name, "Name", "name"),
			category=_required_text(category, "Category", "category"),
			quantity=coerce_quantity(quantity),
			date_acquired=parse_acquired_date(date_acquired) or datetime.utcnow(),
			owner_id=owner_id,
		)
		return self.store.insert(item)

	def get(self, owner_id: str, item_id: str) -> Optional[Item]:
		return self.store.find(owner_id, item_id)

	def update(self, owner_id: str, item_id: str, fields: dict) -> Optional[Item]:
		"""
		Change only the fields present in ``fields``.

		A present quantity is re-clamped, so ``None`` stores 0. A present but
		blank or unparseable date leaves the stored date as it was.
		"""
		values = {}
		if "name" in fields:
			values["name"] = _required_text(fields["name"], "Name", "name")
		if "category" in fields:
			values["category"] = _required_text(fields["category"], "Category", "category")
		if "quantity" in fields:
			values["quantity"] = coerce_quantity(fields["quantity"])
		if "date_acquired" in fields:
			parsed = parse_acquired_date(fields["date_acquired"])
			if parsed is not None:
				values["date_acquired"] = parsed
		return self.store.update(owner_id, item_id, values)

	def delete(self, owner_id: str, item_id: str) -> bool:
		return self.store.delete(owner_id, item_id)

	def stats(self, owner_id: str) -> InventoryStats:
		return summarize(self.list(owner_id))
