from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used by the authorization policy."""

    ADMIN = "Admin"
    FACULTY = "Faculty"


class PeriodSlot(str, Enum):
    """Grid cell for a period that has no recorded entry.

    Kept apart from real statuses, which are free text.
    """

    NOT_MARKED = "Not Marked"
