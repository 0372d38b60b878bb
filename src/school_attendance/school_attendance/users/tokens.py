from __future__ import annotations

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from ..core.exceptions import AuthenticationError


class TokenService:
    """Signs and verifies bearer tokens carrying only the user id."""

    def __init__(self, secret_key: str, *, max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS):
        self._serializer = URLSafeTimedSerializer(secret_key, salt="school-attendance-auth")
        self._max_age = int(max_age_seconds)

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": int(user_id)})

    def resolve(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Session expired, please log in again") from None
        except BadSignature:
            raise AuthenticationError("Invalid authentication token") from None

        if not isinstance(payload, dict) or "uid" not in payload:
            raise AuthenticationError("Invalid authentication token")
        return int(payload["uid"])
