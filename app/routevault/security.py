from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Flask, Response, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from app.routevault.errors import Forbidden
from app.routevault.models import Role

TOKEN_SALT = "routevault.auth-token"


@dataclass(frozen=True)
class Claims:
    """Identity carried by a verified token; passed explicitly to services as the actor."""

    id: int
    username: str
    role: Role

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "role": self.role.value}


def hash_password(password: str, method: str = "scrypt") -> str:
    return generate_password_hash(password, method=method)


def password_matches(password_hash: str, password: str) -> bool:
    """Constant-time comparison (werkzeug uses hmac.compare_digest)."""
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Unknown/garbled hash format in the store.
        return False


def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt=TOKEN_SALT)


def issue_token(claims: Claims, *, secret: str) -> str:
    """
    Signed, timestamped token. The first dot-separated segment is base64url JSON,
    so clients can read username/role for display without a server call.
    """
    return _serializer(secret).dumps(claims.to_dict())


def verify_token(token: str, *, secret: str, max_age: int) -> Claims:
    try:
        raw = _serializer(secret).loads(token, max_age=max_age)
    except SignatureExpired as e:
        raise Forbidden("Token expired") from e
    except BadSignature as e:
        raise Forbidden("Invalid token") from e
    try:
        return Claims(id=int(raw["id"]), username=str(raw["username"]), role=Role(raw["role"]))
    except (KeyError, TypeError, ValueError) as e:
        raise Forbidden("Invalid token") from e


def bearer_token() -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def install_response_headers(app: Flask) -> None:
    @app.after_request
    def _security_headers(response: Response) -> Response:
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        origins = app.config.get("CORS_ORIGINS") or ()
        origin = request.headers.get("Origin")
        if origin and ("*" in origins or origin in origins):
            response.headers["Access-Control-Allow-Origin"] = "*" if "*" in origins else origin
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            if "*" not in origins:
                response.headers.add("Vary", "Origin")
        return response
