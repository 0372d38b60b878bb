from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_calendar_date(value, field_name: str = "date") -> date:
    """Parse a request date into a calendar date.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and full ISO
    timestamps (the time part is dropped).
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(f"Invalid or missing {field_name}")

    text = value.strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return parse_iso_date(text)
    except ValueError:
        raise ValidationError(f"Invalid or missing {field_name}") from None

