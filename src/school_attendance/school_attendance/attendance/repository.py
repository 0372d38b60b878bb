from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceDay, AttendanceKey


class AttendanceRepository(Protocol):
    """Loads and saves whole attendance days.

    ``save_day`` must raise ``ConcurrentUpdateError`` when the stored day no
    longer matches ``day.version`` (or, for a new day, when another writer
    created the same key/date first).
    """

    def get_day(self, key: AttendanceKey, attendance_date: date) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def save_day(self, day: AttendanceDay) -> AttendanceDay:
        raise NotImplementedError

    def find_days_for_class(
        self,
        *,
        department: str,
        year: str,
        section: str,
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceDay]:
        """Days in ``[start_date, end_date]``; ``department`` matches case-insensitively as a substring."""

        raise NotImplementedError

    def find_days_for_student(self, student_id: int) -> Sequence[AttendanceDay]:
        raise NotImplementedError
