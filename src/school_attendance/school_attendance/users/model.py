from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an Admin or Faculty account.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool = True

    def public_view(self) -> dict:
        return {
            "_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "isActive": self.is_active,
        }
