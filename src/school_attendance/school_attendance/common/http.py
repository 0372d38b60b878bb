from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import g, jsonify, request

from ..core.exceptions import AuthenticationError
from ..core.policy import is_allowed

logger = logging.getLogger(__name__)


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def server_error(label: str, exc: Exception):
    logger.exception("%s: %s", label, exc)
    return json_error(str(exc) or "Server error", 500)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def make_guard(auth_service: Any) -> Callable[[str], Callable]:
    """Build a ``requires(action)`` decorator bound to an ``AuthService``.

    The decorated view runs with ``g.current_user`` set; the role checked is
    the one stored server-side, never one supplied by the client.
    """

    def requires(action: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                try:
                    user = auth_service.authenticate_token(bearer_token())
                except AuthenticationError as e:
                    return json_error(str(e), 401)
                except Exception as e:
                    return server_error("Authentication error", e)

                if not is_allowed(action, user.role):
                    return json_error("You do not have permission for this action", 403)

                g.current_user = user
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return requires
