from __future__ import annotations

from datetime import date

import pytest

from src.school_attendance.school_attendance.attendance.service import AttendanceService, normalize_marks
from src.school_attendance.school_attendance.core.enums import PeriodSlot
from src.school_attendance.school_attendance.core.exceptions import ConcurrentUpdateError, ValidationError

CLASS = {"department": "Computer Science", "year": "3", "section": "A", "semester": "5"}


def _students(*periods, student_id="1"):
    return [
        {
            "studentId": student_id,
            "name": "Asha",
            "register": "CS301",
            "periods": [dict(p) for p in periods],
        }
    ]


class FlakyAttendance:
    """Raises ConcurrentUpdateError on the first ``failures`` saves, then delegates."""

    def __init__(self, inner, failures: int):
        self._inner = inner
        self._failures = failures
        self.attempts = 0

    def get_day(self, key, attendance_date):
        return self._inner.get_day(key, attendance_date)

    def save_day(self, day):
        self.attempts += 1
        if self.attempts <= self._failures:
            raise ConcurrentUpdateError("simulated")
        return self._inner.save_day(day)


def test_mark_then_lookup_reflects_submitted_statuses(attendance_repo):
    svc = AttendanceService(attendance_repo)

    svc.mark_attendance(
        **CLASS,
        date="2025-03-03",
        students=_students(
            {"periodNumber": 1, "subject": "Math", "status": "Present"},
            {"periodNumber": 2, "subject": "Eng", "status": "Absent"},
        ),
    )
    rows = svc.lookup(**CLASS, date="2025-03-03")

    assert len(rows) == 1
    assert rows[0].student_id == 1
    assert list(rows[0].periods_status) == ["Present", "Absent"] + [PeriodSlot.NOT_MARKED] * 6


def test_remark_period_overwrites_and_keeps_entry_count(attendance_repo, class_key):
    svc = AttendanceService(attendance_repo)
    svc.mark_attendance(
        **CLASS,
        date="2025-03-03",
        students=_students(
            {"periodNumber": 1, "subject": "Math", "status": "Present"},
            {"periodNumber": 2, "subject": "Eng", "status": "Absent"},
        ),
    )

    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": "2", "status": "Present"}))

    rows = svc.lookup(**CLASS, date="2025-03-03")
    assert rows[0].periods_status[1] == "Present"
    stored = attendance_repo.get_day(class_key, date(2025, 3, 3))
    assert len(stored.find_student(1).periods) == 2


def test_identical_resubmission_leaves_document_unchanged(attendance_repo, class_key):
    svc = AttendanceService(attendance_repo)
    batch = _students({"periodNumber": 1, "subject": "Math", "status": "Absent"})

    svc.mark_attendance(**CLASS, date="2025-03-03", students=batch)
    before = attendance_repo.get_day(class_key, date(2025, 3, 3)).students
    svc.mark_attendance(**CLASS, date="2025-03-03", students=batch)
    after = attendance_repo.get_day(class_key, date(2025, 3, 3)).students

    assert after == before


def test_timestamp_dates_land_on_the_same_day(attendance_repo, class_key):
    svc = AttendanceService(attendance_repo)

    svc.mark_attendance(**CLASS, date="2025-03-03T09:15:00.000Z", students=_students({"periodNumber": 1}))
    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 2}, student_id=7))

    day = attendance_repo.get_day(class_key, date(2025, 3, 3))
    assert [s.student_id for s in day.students] == [1, 7]


def test_status_and_subject_defaults(attendance_repo, class_key):
    svc = AttendanceService(attendance_repo)

    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 4, "status": ""}))

    period = attendance_repo.get_day(class_key, date(2025, 3, 3)).find_student(1).find_period("4")
    assert period.status == "Present"
    assert period.subject == ""


def test_mark_records_faculty_on_new_day(attendance_repo, class_key):
    svc = AttendanceService(attendance_repo)

    svc.mark_attendance(**CLASS, date="2025-03-03", students=[], faculty_id=42)

    day = attendance_repo.get_day(class_key, date(2025, 3, 3))
    assert day.faculty_id == 42
    assert day.students == []


def test_lookup_without_record_returns_none(attendance_repo):
    svc = AttendanceService(attendance_repo)

    assert svc.lookup(**CLASS, date="2025-03-04") is None


def test_lookup_grid_width_follows_configuration(attendance_repo):
    svc = AttendanceService(attendance_repo, periods_per_day=6)
    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 6, "status": "Absent"}))

    grid = svc.lookup(**CLASS, date="2025-03-03")[0].periods_status

    assert len(grid) == 6
    assert grid[5] == "Absent"


@pytest.mark.parametrize("bad_date", [None, "", "03/03/2025", "2025-13-01", "not-a-date"])
def test_invalid_dates_are_rejected(attendance_repo, bad_date):
    svc = AttendanceService(attendance_repo)

    with pytest.raises(ValidationError):
        svc.mark_attendance(**CLASS, date=bad_date, students=[])
    with pytest.raises(ValidationError):
        svc.lookup(**CLASS, date=bad_date)
    assert attendance_repo.saves == 0


def test_missing_class_field_is_rejected(attendance_repo):
    svc = AttendanceService(attendance_repo)

    with pytest.raises(ValidationError):
        svc.mark_attendance(**{**CLASS, "semester": ""}, date="2025-03-03", students=[])


def test_bad_batch_writes_nothing(attendance_repo):
    svc = AttendanceService(attendance_repo)
    students = _students({"periodNumber": 1}) + [{"studentId": "2", "periods": [{"status": "Absent"}]}]

    with pytest.raises(ValidationError):
        svc.mark_attendance(**CLASS, date="2025-03-03", students=students)
    assert attendance_repo.saves == 0


def test_normalize_marks_stringifies_period_numbers():
    marks = normalize_marks(_students({"periodNumber": 3}, {"periodNumber": " 3 "}))

    assert [p.period_number for p in marks[0].periods] == ["3", "3"]
    assert marks[0].student_id == 1


@pytest.mark.parametrize("students", [None, "x", [1], [{"name": "no id"}], [{"studentId": "abc"}]])
def test_normalize_marks_rejects_malformed_payloads(students):
    with pytest.raises(ValidationError):
        normalize_marks(students)


def test_mark_retries_after_concurrent_update(attendance_repo, class_key):
    flaky = FlakyAttendance(attendance_repo, failures=2)
    svc = AttendanceService(flaky, retry_limit=3)

    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 1}))

    assert flaky.attempts == 3
    assert attendance_repo.get_day(class_key, date(2025, 3, 3)) is not None


def test_mark_gives_up_after_retry_limit(attendance_repo):
    flaky = FlakyAttendance(attendance_repo, failures=5)
    svc = AttendanceService(flaky, retry_limit=2)

    with pytest.raises(ConcurrentUpdateError):
        svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 1}))
    assert flaky.attempts == 2


def test_interleaved_writers_do_not_lose_updates(attendance_repo, class_key):
    """A stale writer is rejected by the version check and re-merges on retry."""

    svc = AttendanceService(attendance_repo)
    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 1}))

    stale = attendance_repo.get_day(class_key, date(2025, 3, 3))
    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 2, "status": "Absent"}))

    with pytest.raises(ConcurrentUpdateError):
        attendance_repo.save_day(stale)

    svc.mark_attendance(**CLASS, date="2025-03-03", students=_students({"periodNumber": 3}, student_id=9))
    day = attendance_repo.get_day(class_key, date(2025, 3, 3))
    assert [p.period_number for p in day.find_student(1).periods] == ["1", "2"]
    assert day.find_student(9) is not None
