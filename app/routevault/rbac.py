from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g

from app.routevault.errors import ApiError, Forbidden, Unauthenticated
from app.routevault.models import Role
from app.routevault.security import Claims


def current_claims() -> Claims:
    """Claims for the request; raises 401/403 when the bearer token is missing or bad."""
    claims: Claims | None = getattr(g, "current_user", None)
    if claims is not None:
        return claims
    err: ApiError | None = getattr(g, "auth_error", None)
    raise err or Unauthenticated()


def user_has_role(claims: Claims | None, roles: tuple[Role, ...]) -> bool:
    if not claims:
        return False
    return claims.role in roles


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        current_claims()
        return fn(*args, **kwargs)

    return wrapped


def require_role(*roles: Role) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    allowed = tuple(Role(r) for r in roles)

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            # Unauthenticated → 401/403 from the token check
            claims = current_claims()
            # Authenticated but wrong role → 403
            if not user_has_role(claims, allowed):
                g.missing_role = ",".join(r.value for r in allowed)
                raise Forbidden("Insufficient permissions")
            return fn(*args, **kwargs)

        return wrapped

    return decorator
