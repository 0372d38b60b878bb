from __future__ import annotations

import copy
from dataclasses import replace
from datetime import date
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.school_attendance.school_attendance.attendance.model import AttendanceDay, AttendanceKey
from src.school_attendance.school_attendance.container import assemble
from src.school_attendance.school_attendance.core.enums import Role
from src.school_attendance.school_attendance.core.exceptions import ConcurrentUpdateError
from src.school_attendance.school_attendance.notifications.gateway import SmsResult
from src.school_attendance.school_attendance.students.model import Student
from src.school_attendance.school_attendance.users.model import User
from src.school_attendance.school_attendance.users.tokens import TokenService


class InMemoryAttendance:
    """Stores deep copies so callers never share state with the store."""

    def __init__(self):
        self._days: dict[tuple[AttendanceKey, date], AttendanceDay] = {}
        self._next_id = 1
        self.saves = 0

    def get_day(self, key: AttendanceKey, attendance_date: date) -> Optional[AttendanceDay]:
        day = self._days.get((key, attendance_date))
        return copy.deepcopy(day) if day else None

    def save_day(self, day: AttendanceDay) -> AttendanceDay:
        slot = (day.key, day.attendance_date)
        stored = self._days.get(slot)

        if day.is_new:
            if stored is not None:
                raise ConcurrentUpdateError("created concurrently")
            saved = replace(copy.deepcopy(day), day_id=self._next_id, version=0)
            self._next_id += 1
        else:
            if stored is None or stored.version != day.version:
                raise ConcurrentUpdateError("modified concurrently")
            saved = replace(copy.deepcopy(day), version=day.version + 1)

        self._days[slot] = saved
        self.saves += 1
        return copy.deepcopy(saved)

    def find_days_for_class(self, *, department, year, section, start_date, end_date):
        needle = department.lower()
        return [
            copy.deepcopy(d)
            for d in self._days.values()
            if needle in d.key.department.lower()
            and d.key.year == year
            and d.key.section == section
            and start_date <= d.attendance_date <= end_date
        ]

    def find_days_for_student(self, student_id: int):
        return [copy.deepcopy(d) for d in self._days.values() if d.find_student(student_id)]


class InMemoryStudents:
    def __init__(self, students=()):
        self._by_id: dict[int, Student] = {s.student_id: s for s in students}
        self._next_id = max(self._by_id, default=0) + 1

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._by_id.get(int(student_id))

    def get_by_register(self, register: str) -> Optional[Student]:
        return next((s for s in self._by_id.values() if s.register == register), None)

    def list_students(self, *, department=None, year=None, section=None):
        items = list(self._by_id.values())
        if department:
            items = [s for s in items if department.lower() in s.department.lower()]
        if year:
            items = [s for s in items if s.year == year]
        if section:
            items = [s for s in items if s.section == section]
        return items

    def create_student(self, **fields) -> int:
        sid = self._next_id
        self._next_id += 1
        self._by_id[sid] = Student(student_id=sid, **fields)
        return sid

    def update_student(self, student_id: int, fields: dict) -> bool:
        current = self._by_id.get(int(student_id))
        if not current:
            return False
        self._by_id[current.student_id] = replace(current, **fields)
        return True

    def delete_by_id(self, student_id: int) -> bool:
        return self._by_id.pop(int(student_id), None) is not None


class InMemoryUsers:
    def __init__(self, users=()):
        self._by_id: dict[int, User] = {u.user_id: u for u in users}
        self._next_id = max(self._by_id, default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def list_all(self):
        return list(self._by_id.values())

    def create_user(self, *, name, email, password_hash, role) -> int:
        uid = self._next_id
        self._next_id += 1
        self._by_id[uid] = User(user_id=uid, name=name, email=email, password_hash=password_hash, role=role)
        return uid

    def update_user(self, user_id: int, fields: dict) -> bool:
        current = self._by_id.get(int(user_id))
        if not current:
            return False
        self._by_id[current.user_id] = replace(current, **fields)
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self._by_id.pop(int(user_id), None) is not None

    def count_by_role(self, role: Role) -> int:
        return sum(1 for u in self._by_id.values() if u.role == role)


class RecordingSms:
    def __init__(self, result: SmsResult = SmsResult(success=True)):
        self.result = result
        self.sent: list[tuple[str, str]] = []

    def send(self, phone: str, message: str) -> SmsResult:
        self.sent.append((phone, message))
        return self.result


def make_student(student_id: int, name: str, register: str, **overrides) -> Student:
    fields = dict(department="Computer Science", year="3", section="A", semester="5", phone="+15550100")
    fields.update(overrides)
    return Student(student_id=student_id, name=name, register=register, **fields)


def make_user(user_id: int, role: Role, password: str = "secret123") -> User:
    return User(
        user_id=user_id,
        name=f"{role.value} {user_id}",
        email=f"{role.value.lower()}{user_id}@school.test",
        password_hash=generate_password_hash(password),
        role=role,
    )


@pytest.fixture
def class_key() -> AttendanceKey:
    return AttendanceKey(department="Computer Science", year="3", section="A", semester="5")


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents(
        [
            make_student(1, "Asha", "CS301"),
            make_student(2, "Ben", "CS302", phone=None),
            make_student(3, "Chen", "CS303"),
            make_student(4, "Dina", "ME301", department="Mechanical"),
        ]
    )


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers([make_user(1, Role.ADMIN), make_user(2, Role.FACULTY)])


@pytest.fixture
def sms() -> RecordingSms:
    return RecordingSms()


@pytest.fixture
def container(users_repo, students_repo, attendance_repo, sms):
    return assemble(
        users_repo=users_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        sms_gateway=sms,
        secret_key="test-secret",
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.school_attendance.school_attendance.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    tokens = TokenService("test-secret")

    def _headers(user_id: int) -> dict:
        token = tokens.issue(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
