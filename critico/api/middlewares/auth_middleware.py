# critico/api/middlewares/auth_middleware.py
from functools import wraps
from typing import Any, Callable, TypeVar

from flask import g, request

from critico.core.exceptions import UnauthorizedError
from critico.infrastructure.security.jwt_provider import JwtProvider

F = TypeVar("F", bound=Callable[..., Any])


def get_bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            raise UnauthorizedError("Token fehlt.")
        g.auth = JwtProvider().decode(token)
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(fn: F) -> F:
    """Like require_auth, but anonymous callers pass with g.auth = None."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = get_bearer_token()
        g.auth = JwtProvider().decode(token) if token else None
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def auth_user_id() -> int:
    auth = getattr(g, "auth", None)
    if not auth:
        raise UnauthorizedError()
    return int(auth["sub"])
