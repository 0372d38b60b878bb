from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Roster entry. Attendance entries reference it by ``student_id``."""

    student_id: int
    name: str
    register: str
    department: str
    year: str
    section: str
    semester: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
