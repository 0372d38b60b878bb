from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "register", "department", "year", "section")
_OPTIONAL_FIELDS = ("semester", "phone", "email")


class StudentService:
    """Use case: manage the student roster."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def add_student(
        self,
        *,
        name: Any,
        register: Any,
        department: Any,
        year: Any,
        section: Any,
        semester: Any = None,
        phone: Any = None,
        email: Any = None,
    ) -> Student:
        name = require_non_empty(name, "name")
        register = require_non_empty(register, "register")

        if self._students.get_by_register(register):
            raise ValidationError("Register number already exists")

        student_id = self._students.create_student(
            name=name,
            register=register,
            department=require_non_empty(department, "department"),
            year=require_non_empty(year, "year"),
            section=require_non_empty(section, "section"),
            semester=optional_text(semester),
            phone=optional_text(phone),
            email=optional_text(email),
        )
        logger.info("Added student %s (%s)", student_id, register)
        return self.get_student(student_id)

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def list_students(
        self,
        *,
        department: Optional[str] = None,
        year: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Sequence[Student]:
        return self._students.list_students(
            department=optional_text(department),
            year=optional_text(year),
            section=optional_text(section),
        )

    def update_student(self, student_id: int, data: dict) -> Student:
        current = self.get_student(student_id)

        fields: dict = {}
        for name in _REQUIRED_FIELDS:
            if name in data:
                fields[name] = require_non_empty(data[name], name)
        for name in _OPTIONAL_FIELDS:
            if name in data:
                fields[name] = optional_text(data[name])

        new_register = fields.get("register")
        if new_register and new_register != current.register:
            clash = self._students.get_by_register(new_register)
            if clash and clash.student_id != current.student_id:
                raise ValidationError("Register number already exists")

        if not self._students.update_student(current.student_id, fields):
            raise NotFoundError("Student not found")
        return self.get_student(current.student_id)

    def delete_student(self, student_id: int) -> None:
        if not self._students.delete_by_id(int(student_id)):
            raise NotFoundError("Student not found")
        logger.info("Deleted student %s", student_id)
