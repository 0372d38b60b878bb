from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


def parse_role(value: Any) -> Role:
    try:
        return Role(str(value).strip())
    except ValueError:
        raise ValidationError("Invalid role") from None


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class AuthService:
    """Use cases: log in and resolve the user behind a bearer token."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def login(self, email: Any, password: Any) -> LoginResult:
        email = str(email or "").strip().lower()
        user = self._users.get_by_email(email) if email else None
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, str(password or ""))
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s logged in", user.user_id)
        return LoginResult(token=self._tokens.issue(user.user_id), user=user)

    def authenticate_token(self, token: Optional[str]) -> User:
        """Load the user for a token; the role always comes from the database."""

        if not token:
            raise AuthenticationError("Authentication required")

        user = self._users.get_by_id(self._tokens.resolve(token))
        if not user or not user.is_active:
            raise AuthenticationError("Account is disabled or no longer exists")
        return user


class UserService:
    """Use case: manage Admin/Faculty accounts."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(self, *, name: Any, email: Any, password: Any, role: Any = Role.FACULTY.value) -> User:
        name = require_non_empty(name, "name")
        email = require_non_empty(email, "email").lower()
        password = require_min_length("" if password is None else str(password), "password", MIN_PASSWORD_LENGTH)
        role = parse_role(role)

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        logger.info("Registered %s user %s", role.value, user_id)
        return self.get_user(user_id)

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def update_user(self, user_id: int, data: dict) -> User:
        current = self.get_user(user_id)

        fields: dict = {}
        if "name" in data:
            fields["name"] = require_non_empty(data["name"], "name")
        if "email" in data:
            email = require_non_empty(data["email"], "email").lower()
            clash = self._users.get_by_email(email)
            if clash and clash.user_id != current.user_id:
                raise ValidationError("Email is already registered")
            fields["email"] = email
        if data.get("password"):
            password = require_min_length(str(data["password"]), "password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(password)
        if "role" in data:
            role = parse_role(data["role"])
            if current.role == Role.ADMIN and role != Role.ADMIN:
                self._ensure_not_last_admin()
            fields["role"] = role

        if not self._users.update_user(current.user_id, fields):
            raise NotFoundError("User not found")
        return self.get_user(current.user_id)

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        if user.role == Role.ADMIN:
            self._ensure_not_last_admin()

        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s", user.user_id)

    def _ensure_not_last_admin(self) -> None:
        if self._users.count_by_role(Role.ADMIN) <= 1:
            raise ValidationError("Cannot remove the last Admin account")
