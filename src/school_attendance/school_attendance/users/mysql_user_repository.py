from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, name, email, password_hash, role, is_active"
_UPDATABLE = ("name", "email", "password_hash", "role", "is_active")


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        name=r["name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY role ASC, name ASC")
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role)
                VALUES(%s,%s,%s,%s)
                """,
                (name, email, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, fields: dict) -> bool:
        columns = [c for c in _UPDATABLE if c in fields]
        if not columns:
            return self.get_by_id(user_id) is not None

        values = []
        for c in columns:
            value = fields[c]
            values.append(value.value if isinstance(value, Role) else value)

        assignments = ", ".join(f"{c}=%s" for c in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {assignments} WHERE user_id=%s", tuple(values) + (int(user_id),))
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def count_by_role(self, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM users WHERE role=%s", (role.value,))
            row = fetchone(cur)
            return int(row["total"]) if row else 0
