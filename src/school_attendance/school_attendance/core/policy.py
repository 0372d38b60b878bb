"""Authorization policy: which roles may run which operation.

Anonymous operations (register, login) are absent from the table.
"""

from __future__ import annotations

from .enums import Role

_STAFF = frozenset({Role.ADMIN, Role.FACULTY})
_ADMIN = frozenset({Role.ADMIN})

POLICY: dict[str, frozenset[Role]] = {
    "student.add": _STAFF,
    "student.list": _STAFF,
    "student.update": _ADMIN,
    "student.delete": _ADMIN,
    "user.create": _ADMIN,
    "user.list": _ADMIN,
    "user.update": _ADMIN,
    "user.delete": _ADMIN,
    "attendance.mark": _STAFF,
    "attendance.view": _STAFF,
    "attendance.report": _STAFF,
    "attendance.notify": _STAFF,
}


def is_allowed(action: str, role: Role) -> bool:
    # Unknown actions are denied
    return role in POLICY.get(action, frozenset())
