from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConcurrentUpdateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders, like_contains
from .model import AttendanceDay, AttendanceKey, PeriodEntry, StudentEntry
from .repository import AttendanceRepository

_DAY_COLUMNS = "day_id, department, year, section, semester, attendance_date, faculty_id, version"


def _is_duplicate_day(error: IntegrityError) -> bool:
    # only a clash on the day key means another writer created the day first
    return error.errno == errorcode.ER_DUP_ENTRY and "uq_attendance_day" in str(error.msg or "")


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_day(self, key: AttendanceKey, attendance_date: date) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}
                FROM attendance_days
                WHERE department=%s AND year=%s AND section=%s AND semester=%s AND attendance_date=%s
                """,
                (key.department, key.year, key.section, key.semester, attendance_date),
            )
            row = fetchone(cur)
            if not row:
                return None
            return self._load_days(cur, [row])[0]

    def save_day(self, day: AttendanceDay) -> AttendanceDay:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if day.is_new:
                    cur.execute(
                        """
                        INSERT INTO attendance_days(department, year, section, semester, attendance_date, faculty_id, version)
                        VALUES(%s,%s,%s,%s,%s,%s,0)
                        """,
                        (
                            day.key.department,
                            day.key.year,
                            day.key.section,
                            day.key.semester,
                            day.attendance_date,
                            day.faculty_id,
                        ),
                    )
                    day_id = int(cur.lastrowid)
                    version = 0
                else:
                    cur.execute(
                        """
                        UPDATE attendance_days
                        SET version = version + 1
                        WHERE day_id=%s AND version=%s
                        """,
                        (day.day_id, day.version),
                    )
                    if cur.rowcount == 0:
                        raise ConcurrentUpdateError(f"Attendance day {day.day_id} was modified concurrently")
                    day_id = int(day.day_id)
                    version = day.version + 1
                    cur.execute("DELETE FROM attendance_students WHERE day_id=%s", (day_id,))

                self._insert_students(cur, day_id, day.students)
        except IntegrityError as e:
            if day.is_new and _is_duplicate_day(e):
                raise ConcurrentUpdateError("Attendance day was created concurrently") from e
            raise

        return replace(day, day_id=day_id, version=version)

    def find_days_for_class(
        self,
        *,
        department: str,
        year: str,
        section: str,
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}
                FROM attendance_days
                WHERE LOWER(department) LIKE LOWER(%s)
                  AND year=%s AND section=%s
                  AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date ASC, day_id ASC
                """,
                (like_contains(department), year, section, start_date, end_date),
            )
            return self._load_days(cur, fetchall(cur))

    def find_days_for_student(self, student_id: int) -> Sequence[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT d.day_id, d.department, d.year, d.section, d.semester,
                       d.attendance_date, d.faculty_id, d.version
                FROM attendance_days d
                JOIN attendance_students s ON s.day_id = d.day_id
                WHERE s.student_id=%s
                ORDER BY d.attendance_date ASC, d.day_id ASC
                """,
                (int(student_id),),
            )
            return self._load_days(cur, fetchall(cur))

    def _insert_students(self, cur, day_id: int, students: Sequence[StudentEntry]) -> None:
        for position, entry in enumerate(students):
            cur.execute(
                """
                INSERT INTO attendance_students(day_id, position, student_id, name, register, department, year, section)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    day_id,
                    position,
                    entry.student_id,
                    entry.name,
                    entry.register,
                    entry.department,
                    entry.year,
                    entry.section,
                ),
            )
            entry_id = int(cur.lastrowid)
            if not entry.periods:
                continue
            cur.executemany(
                """
                INSERT INTO attendance_periods(entry_id, position, period_number, subject, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                [
                    (entry_id, idx, p.period_number, p.subject, p.status)
                    for idx, p in enumerate(entry.periods)
                ],
            )

    def _load_days(self, cur, day_rows: List[dict]) -> List[AttendanceDay]:
        if not day_rows:
            return []

        day_ids = [int(r["day_id"]) for r in day_rows]
        cur.execute(
            f"""
            SELECT entry_id, day_id, student_id, name, register, department, year, section
            FROM attendance_students
            WHERE day_id IN ({in_placeholders(day_ids)})
            ORDER BY day_id ASC, position ASC
            """,
            tuple(day_ids),
        )
        entry_rows = fetchall(cur)

        periods_by_entry: Dict[int, List[PeriodEntry]] = {}
        if entry_rows:
            entry_ids = [int(r["entry_id"]) for r in entry_rows]
            cur.execute(
                f"""
                SELECT entry_id, period_number, subject, status
                FROM attendance_periods
                WHERE entry_id IN ({in_placeholders(entry_ids)})
                ORDER BY entry_id ASC, position ASC
                """,
                tuple(entry_ids),
            )
            for r in fetchall(cur):
                periods_by_entry.setdefault(int(r["entry_id"]), []).append(
                    PeriodEntry(
                        period_number=str(r["period_number"]),
                        subject=r.get("subject") or "",
                        status=r["status"],
                    )
                )

        students_by_day: Dict[int, List[StudentEntry]] = {}
        for r in entry_rows:
            students_by_day.setdefault(int(r["day_id"]), []).append(
                StudentEntry(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    register=r["register"],
                    department=r["department"],
                    year=r["year"],
                    section=r["section"],
                    periods=periods_by_entry.get(int(r["entry_id"]), []),
                )
            )

        return [
            AttendanceDay(
                key=AttendanceKey(
                    department=r["department"],
                    year=r["year"],
                    section=r["section"],
                    semester=r["semester"],
                ),
                attendance_date=r["attendance_date"],
                students=students_by_day.get(int(r["day_id"]), []),
                faculty_id=r.get("faculty_id"),
                day_id=int(r["day_id"]),
                version=int(r["version"]),
            )
            for r in day_rows
        ]
