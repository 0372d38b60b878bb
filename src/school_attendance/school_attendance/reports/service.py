from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..attendance.model import AttendanceDay, StudentEntry
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import parse_calendar_date
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository

CLASS_REPORT_FIELDS = [
    "_id",
    "name",
    "register",
    "department",
    "year",
    "section",
    "totalPeriods",
    "presentCount",
    "percentage",
]


@dataclass(frozen=True)
class AttendanceTally:
    total_periods: int = 0
    present_count: int = 0

    def add(self, entry: Optional[StudentEntry]) -> "AttendanceTally":
        if entry is None:
            return self
        return AttendanceTally(
            total_periods=self.total_periods + entry.total_periods,
            present_count=self.present_count + entry.present_count,
        )

    @property
    def absent_count(self) -> int:
        return self.total_periods - self.present_count

    @property
    def percentage(self) -> float:
        if not self.total_periods:
            return 0
        return self.present_count / self.total_periods * 100


def tally_for(student_id: int, days: Iterable[AttendanceDay]) -> AttendanceTally:
    tally = AttendanceTally()
    for day in days:
        tally = tally.add(day.find_student(student_id))
    return tally


def _student_row(student: Student, tally: AttendanceTally) -> dict:
    return {
        "_id": student.student_id,
        "name": student.name,
        "register": student.register,
        "department": student.department,
        "year": student.year,
        "section": student.section,
        "totalPeriods": tally.total_periods,
        "presentCount": tally.present_count,
        "percentage": tally.percentage,
    }


class ReportService:
    """Attendance percentages per class (date range) and per student (all time)."""

    def __init__(self, students: StudentRepository, attendance: AttendanceRepository):
        self._students = students
        self._attendance = attendance

    def report_for_class(
        self,
        *,
        from_date: Any,
        to_date: Any,
        department: Any,
        year: Any,
        section: Any,
    ) -> list[dict]:
        if not all([from_date, to_date, department, year, section]):
            raise ValidationError("Missing required fields")

        start = parse_calendar_date(from_date, "fromDate")
        end = parse_calendar_date(to_date, "toDate")
        if start > end:
            raise ValidationError("fromDate must not be after toDate")

        department = require_non_empty(department, "department")
        year = require_non_empty(year, "year")
        section = require_non_empty(section, "section")

        students = self._students.list_students(department=department, year=year, section=section)
        if not students:
            raise NotFoundError("No students found for this class")

        days = self._attendance.find_days_for_class(
            department=department,
            year=year,
            section=section,
            start_date=start,
            end_date=end,
        )

        return [_student_row(s, tally_for(s.student_id, days)) for s in students]

    def report_for_student(self, student_id: Any) -> dict:
        try:
            sid = int(str(student_id).strip())
        except (TypeError, ValueError):
            raise NotFoundError("Student not found") from None

        student = self._students.get_by_id(sid)
        if not student:
            raise NotFoundError("Student not found")

        tally = tally_for(student.student_id, self._attendance.find_days_for_student(student.student_id))

        row = _student_row(student, tally)
        row["absentCount"] = tally.absent_count
        return row
