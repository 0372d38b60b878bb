from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_contains
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, name, register, department, year, section, semester, phone, email"
_UPDATABLE = ("name", "register", "department", "year", "section", "semester", "phone", "email")


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r["name"],
        register=r["register"],
        department=r["department"],
        year=r["year"],
        section=r["section"],
        semester=r.get("semester"),
        phone=r.get("phone"),
        email=r.get("email"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_by_register(self, register: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE register=%s", (register,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_students(
        self,
        *,
        department: Optional[str] = None,
        year: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Sequence[Student]:
        clauses = ["1=1"]
        params: list[object] = []

        if department:
            clauses.append("LOWER(department) LIKE LOWER(%s)")
            params.append(like_contains(department))
        if year:
            clauses.append("year=%s")
            params.append(year)
        if section:
            clauses.append("section=%s")
            params.append(section)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE {where}
                ORDER BY department ASC, year ASC, section ASC, register ASC
                """,
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(name, register, department, year, section, semester, phone, email)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, register, department, year, section, semester, phone, email),
            )
            return int(cur.lastrowid)

    def update_student(self, student_id: int, fields: dict) -> bool:
        columns = [c for c in _UPDATABLE if c in fields]
        if not columns:
            return self.get_by_id(student_id) is not None

        assignments = ", ".join(f"{c}=%s" for c in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE students SET {assignments} WHERE student_id=%s",
                tuple(fields[c] for c in columns) + (int(student_id),),
            )
            # MySQL reports 0 affected rows when values are unchanged
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM students WHERE student_id=%s", (int(student_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
