from __future__ import annotations

import uuid
from typing import Any

from flask import Blueprint, current_app, g, jsonify, request

from app.routevault.audit import record_event
from app.routevault.errors import ApiError, Conflict, Unauthorized, ValidationError, field_error
from app.routevault.models import Role, StoreDocument, User, time_id
from app.routevault.security import Claims, bearer_token, hash_password, issue_token, password_matches, verify_token
from app.routevault.store import get_store

bp = Blueprint("auth", __name__)

USERNAME_MIN = 3
USERNAME_MAX = 30
PASSWORD_MIN = 8


def request_payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def load_current_user() -> None:
    """
    Resolves g.current_user from the bearer token (stateless, no store access).
    A bad token is remembered on g.auth_error and only raised by endpoints that
    require authentication. Also assigns a per-request request_id for log correlation.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    g.auth_error = None

    token = bearer_token()
    if not token:
        return
    try:
        g.current_user = verify_token(
            token,
            secret=current_app.config["SECRET_KEY"],
            max_age=int(current_app.config["TOKEN_MAX_AGE_SECONDS"]),
        )
    except ApiError as e:
        g.auth_error = e


def validate_registration(payload: dict) -> list[dict[str, str]]:
    errors = []
    username = payload.get("username")
    password = payload.get("password")
    if not isinstance(username, str) or not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        errors.append(field_error("username", f"Username must be {USERNAME_MIN} to {USERNAME_MAX} characters."))
    if not isinstance(password, str) or len(password) < PASSWORD_MIN:
        errors.append(field_error("password", f"Password must be at least {PASSWORD_MIN} characters."))
    return errors


def validate_login(payload: dict) -> list[dict[str, str]]:
    errors = []
    username = payload.get("username")
    password = payload.get("password")
    if not isinstance(username, str) or len(username) < USERNAME_MIN:
        errors.append(field_error("username", f"Username must be at least {USERNAME_MIN} characters."))
    if not isinstance(password, str) or not password:
        errors.append(field_error("password", "Password is required."))
    return errors


def register_user(doc: StoreDocument, username: str, password: str, *, hash_method: str = "scrypt") -> User:
    """Create a `user`-role account. Usernames are matched case-sensitively."""
    if doc.find_user(username):
        raise Conflict("User already exists")
    user = User(
        id=time_id(u.id for u in doc.users),
        username=username,
        password_hash=hash_password(password, hash_method),
        role=Role.USER,
    )
    doc.users.append(user)
    record_event(doc, actor=user, action="register")
    return user


def login_user(doc: StoreDocument, username: str, password: str) -> User:
    user = doc.find_user(username)
    if not user or not password_matches(user.password_hash, password):
        raise Unauthorized()
    record_event(doc, actor=user, action="login")
    return user


@bp.post("/register")
def register_post():
    payload = request_payload()
    errors = validate_registration(payload)
    if errors:
        raise ValidationError(errors)

    with get_store().transaction() as doc:
        register_user(
            doc,
            payload["username"],
            payload["password"],
            hash_method=current_app.config["PASSWORD_HASH_METHOD"],
        )
    return jsonify({"message": "Registration successful"}), 201


@bp.post("/login")
def login_post():
    payload = request_payload()
    errors = validate_login(payload)
    if errors:
        raise ValidationError(errors)

    username = payload["username"]
    try:
        with get_store().transaction() as doc:
            user = login_user(doc, username, payload["password"])
    except Unauthorized:
        current_app.logger.info("Login failed (username=%s request_id=%s)", username, g.request_id)
        raise

    claims = Claims(id=user.id, username=user.username, role=user.role)
    token = issue_token(claims, secret=current_app.config["SECRET_KEY"])
    return jsonify({"token": token, "role": user.role.value})
