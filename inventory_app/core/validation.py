"""Field coercion rules for inventory forms.

Form bodies arrive as strings (or not at all). These helpers turn them into
stored values with fixed, documented edge cases instead of relying on loose
numeric coercion.
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Optional

# Largest value a signed 64-bit INTEGER column holds.
MAX_QUANTITY = 2**63 - 1


def clean_text(value: Any) -> str:
	"""Trim a text field; missing values become the empty string."""
	if value is None:
		return ""
	return str(value).strip()


def coerce_quantity(value: Any) -> int:
	"""
	Clamp a submitted quantity to a non-negative integer.

	- ``None``, blank strings, non-numeric text, NaN and infinities give 0.
	- Fractional values are truncated toward zero (``"3.9"`` gives 3).
	- Negative values give 0.
	- Values above ``MAX_QUANTITY`` are clamped to it.

	Args:
		value: Raw form value (str, int, float or None)

	Returns:
		Integer quantity >= 0
	"""
	if value is None or isinstance(value, bool):
		return 0
	if isinstance(value, int):
		return min(max(0, value), MAX_QUANTITY)
	try:
		number = float(str(value).strip())
	except ValueError:
		return 0
	if math.isnan(number) or math.isinf(number):
		return 0
	return min(max(0, int(number)), MAX_QUANTITY)


def parse_acquired_date(value: Any) -> Optional[datetime]:
	"""
	Strict ISO 8601 parse of an acquisition date.

	Accepts ``YYYY-MM-DD`` or a full ISO datetime. Timezone-aware values are
	converted to naive UTC. Returns None for anything else, leaving the
	fallback to the caller.
	"""
	if value is None:
		return None
	if isinstance(value, datetime):
		parsed = value
	elif isinstance(value, date):
		return datetime(value.year, value.month, value.day)
	else:
		text = str(value).strip()
		if not text:
			return None
		try:
			parsed = datetime.fromisoformat(text)
		except ValueError:
			return None
	if parsed.tzinfo is not None:
		try:
			parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
		except OverflowError:
			# Shifting to UTC crossed year 1 or 9999.
			return None
	return parsed
