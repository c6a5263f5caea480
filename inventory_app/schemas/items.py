from typing import Optional

from pydantic import BaseModel


class ItemForm(BaseModel):
	"""Raw add/edit form fields. Coercion happens in the inventory service."""

	name: Optional[str] = None
	category: Optional[str] = None
	quantity: Optional[str] = None
	date_acquired: Optional[str] = None

	@classmethod
	def from_form(cls, name=None, category=None, quantity=None, date_acquired=None, dateAcquired=None):
		# Forms may post either spelling of the date field.
		return cls(
			name=name,
			category=category,
			quantity=quantity,
			date_acquired=dateAcquired if dateAcquired is not None else date_acquired,
		)

	def to_fields(self) -> dict:
		# An edit form always submits quantity, so a missing one clamps to 0.
		fields = {"quantity": self.quantity}
		if self.name is not None:
			fields["name"] = self.name
		if self.category is not None:
			fields["category"] = self.category
		if self.date_acquired is not None:
			fields["date_acquired"] = self.date_acquired
		return fields

	def form_values(self) -> dict:
		return {
			"name": self.name or "",
			"category": self.category or "",
			"quantity": self.quantity or "",
			"date_acquired": self.date_acquired or "",
		}
