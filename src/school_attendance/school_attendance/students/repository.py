from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_register(self, register: str) -> Optional[Student]:
        raise NotImplementedError

    def list_students(
        self,
        *,
        department: Optional[str] = None,
        year: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Sequence[Student]:
        """``department`` matches case-insensitively as a substring; the rest exactly."""

        raise NotImplementedError

    def create_student(
        self,
        *,
        name: str,
        register: str,
        department: str,
        year: str,
        section: str,
        semester: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_student(self, student_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError
