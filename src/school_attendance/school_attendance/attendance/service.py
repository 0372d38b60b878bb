from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from ..common.datetime_utils import parse_calendar_date
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_MARK_RETRY_LIMIT, DEFAULT_PERIOD_STATUS, DEFAULT_PERIODS_PER_DAY
from ..core.exceptions import ConcurrentUpdateError, ValidationError
from .model import AttendanceDay, AttendanceKey, PeriodEntry, StudentMark, StudentStatusRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def build_key(*, department: Any, year: Any, section: Any, semester: Any) -> AttendanceKey:
    return AttendanceKey(
        department=require_non_empty(department, "department"),
        year=require_non_empty(year, "year"),
        section=require_non_empty(section, "section"),
        semester=require_non_empty(semester, "semester"),
    )


def parse_student_id(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid studentId")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid studentId") from None


def normalize_period(raw: Any) -> PeriodEntry:
    if not isinstance(raw, dict):
        raise ValidationError("Each period must be an object")

    number = raw.get("periodNumber")
    if number is None or not str(number).strip():
        raise ValidationError("periodNumber is required")

    return PeriodEntry(
        period_number=str(number).strip(),
        subject=str(raw.get("subject") or ""),
        status=str(raw.get("status") or DEFAULT_PERIOD_STATUS),
    )


def normalize_marks(students: Any) -> List[StudentMark]:
    """Turn the ``students`` payload of a mark request into ``StudentMark`` values."""

    if not isinstance(students, list):
        raise ValidationError("students must be a list")

    marks: List[StudentMark] = []
    for raw in students:
        if not isinstance(raw, dict):
            raise ValidationError("Each student must be an object")
        if raw.get("studentId") in (None, ""):
            raise ValidationError("studentId is required")

        periods = raw.get("periods") or []
        if not isinstance(periods, list):
            raise ValidationError("periods must be a list")

        marks.append(
            StudentMark(
                student_id=parse_student_id(raw["studentId"]),
                name=str(raw.get("name") or ""),
                register=str(raw.get("register") or ""),
                periods=tuple(normalize_period(p) for p in periods),
            )
        )
    return marks


class AttendanceService:
    """Use cases: mark attendance for a class/day and look it up."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        periods_per_day: int = DEFAULT_PERIODS_PER_DAY,
        retry_limit: int = DEFAULT_MARK_RETRY_LIMIT,
    ):
        self._attendance = attendance
        self._periods_per_day = int(periods_per_day)
        self._retry_limit = max(1, int(retry_limit))

    @property
    def periods_per_day(self) -> int:
        return self._periods_per_day

    def mark_attendance(
        self,
        *,
        department: Any,
        year: Any,
        section: Any,
        semester: Any,
        date: Any,
        students: Any,
        faculty_id: Optional[int] = None,
    ) -> AttendanceDay:
        key = build_key(department=department, year=year, section=section, semester=semester)
        attendance_date = parse_calendar_date(date)
        marks = normalize_marks(students)

        for attempt in range(1, self._retry_limit + 1):
            day = self._attendance.get_day(key, attendance_date)
            if day is None:
                day = AttendanceDay.empty(key, attendance_date, faculty_id=faculty_id)
            day.merge(marks)

            try:
                saved = self._attendance.save_day(day)
            except ConcurrentUpdateError:
                logger.warning(
                    "Concurrent update on attendance %s %s (attempt %d/%d)",
                    key, attendance_date, attempt, self._retry_limit,
                )
                continue

            logger.info("Saved attendance %s %s (%d students)", key, attendance_date, len(marks))
            return saved

        raise ConcurrentUpdateError(
            f"Attendance for {attendance_date.isoformat()} kept changing during save; please retry"
        )

    def lookup(
        self,
        *,
        department: Any,
        year: Any,
        section: Any,
        semester: Any,
        date: Any,
    ) -> Optional[Sequence[StudentStatusRow]]:
        """Status grid for every student of the day, or ``None`` when no day was recorded."""

        attendance_date = parse_calendar_date(date)
        key = build_key(department=department, year=year, section=section, semester=semester)

        day = self._attendance.get_day(key, attendance_date)
        if day is None:
            return None

        return [
            StudentStatusRow(
                student_id=entry.student_id,
                name=entry.name,
                register=entry.register,
                periods_status=entry.periods_status(self._periods_per_day),
            )
            for entry in day.students
        ]
