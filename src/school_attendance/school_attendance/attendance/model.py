from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence, Union

from ..core.constants import PRESENT_STATUS
from ..core.enums import PeriodSlot


@dataclass(frozen=True)
class AttendanceKey:
    """Class placement an attendance day belongs to."""

    department: str
    year: str
    section: str
    semester: str


@dataclass
class PeriodEntry:
    """One class period's subject/status for one student.

    ``period_number`` is a label (``"1"``, ``"2"``, ...), never an index.
    """

    period_number: str
    subject: str = ""
    status: str = PRESENT_STATUS

    @property
    def is_present(self) -> bool:
        return self.status == PRESENT_STATUS


@dataclass(frozen=True)
class StudentMark:
    """Normalised input for one student of a mark-attendance batch."""

    student_id: int
    name: str
    register: str
    periods: tuple[PeriodEntry, ...] = ()


@dataclass
class StudentEntry:
    """A student's sub-record inside an attendance day.

    ``name`` and ``register`` are copied from the roster when the student is
    first marked for the day and are not refreshed afterwards.
    """

    student_id: int
    name: str
    register: str
    department: str
    year: str
    section: str
    periods: List[PeriodEntry] = field(default_factory=list)

    def find_period(self, period_number: str) -> Optional[PeriodEntry]:
        for period in self.periods:
            if period.period_number == period_number:
                return period
        return None

    def apply_period(self, incoming: PeriodEntry) -> None:
        existing = self.find_period(incoming.period_number)
        if existing:
            # subject and status are replaced together
            existing.status = incoming.status
            existing.subject = incoming.subject
        else:
            self.periods.append(
                PeriodEntry(
                    period_number=incoming.period_number,
                    subject=incoming.subject,
                    status=incoming.status,
                )
            )

    @property
    def total_periods(self) -> int:
        return len(self.periods)

    @property
    def present_count(self) -> int:
        return sum(1 for p in self.periods if p.is_present)

    def periods_status(self, width: int) -> List[Union[str, PeriodSlot]]:
        by_number = {p.period_number: p.status for p in self.periods}
        return [by_number.get(str(n), PeriodSlot.NOT_MARKED) for n in range(1, width + 1)]


@dataclass
class AttendanceDay:
    """Per-class, per-date attendance document.

    ``version`` is bumped by the repository on every save and is used to
    detect concurrent writers.
    """

    key: AttendanceKey
    attendance_date: date
    students: List[StudentEntry] = field(default_factory=list)
    faculty_id: Optional[int] = None
    day_id: Optional[int] = None
    version: int = 0

    @classmethod
    def empty(cls, key: AttendanceKey, attendance_date: date, *, faculty_id: Optional[int] = None) -> "AttendanceDay":
        return cls(key=key, attendance_date=attendance_date, faculty_id=faculty_id)

    @property
    def is_new(self) -> bool:
        return self.day_id is None

    def find_student(self, student_id: int) -> Optional[StudentEntry]:
        for entry in self.students:
            if entry.student_id == student_id:
                return entry
        return None

    def merge(self, marks: Iterable[StudentMark]) -> None:
        """Merge a batch of student marks into this day.

        Unknown students are appended with all their periods. For known
        students each period overwrites the entry with the same period number
        or is appended.
        """

        for mark in marks:
            entry = self.find_student(mark.student_id)
            if entry is None:
                entry = StudentEntry(
                    student_id=mark.student_id,
                    name=mark.name,
                    register=mark.register,
                    department=self.key.department,
                    year=self.key.year,
                    section=self.key.section,
                )
                self.students.append(entry)

            for period in mark.periods:
                entry.apply_period(period)


@dataclass(frozen=True)
class StudentStatusRow:
    """Read-model for the attendance lookup grid."""

    student_id: int
    name: str
    register: str
    periods_status: Sequence[Union[str, PeriodSlot]]
