from __future__ import annotations

from typing import Any

from ..common.validators import optional_text
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .gateway import SmsGateway, SmsResult


class NotificationService:
    """Use case: text a student's recorded phone number."""

    def __init__(self, students: StudentRepository, gateway: SmsGateway):
        self._students = students
        self._gateway = gateway

    def notify_parent(self, student_id: Any, message: Any) -> SmsResult:
        message = optional_text(message)
        if student_id in (None, "") or not message:
            raise ValidationError("Missing required fields")

        try:
            sid = int(str(student_id).strip())
        except ValueError:
            raise NotFoundError("Student or phone number not found") from None

        student = self._students.get_by_id(sid)
        if not student or not student.phone:
            raise NotFoundError("Student or phone number not found")

        return self._gateway.send(student.phone, message)
