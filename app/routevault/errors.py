from __future__ import annotations

from typing import Any

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(ApiError):
    """Malformed or missing input; carries per-field detail."""

    status_code = 400
    message = "Invalid request"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        return {"errors": self.errors}


class Unauthenticated(ApiError):
    status_code = 401
    message = "Login required"


class Unauthorized(ApiError):
    status_code = 401
    message = "Invalid username or password"


class Forbidden(ApiError):
    status_code = 403
    message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    status_code = 409
    message = "Already exists"


class RateLimited(ApiError):
    status_code = 429
    message = "Too many requests"


def field_error(field: str, message: str) -> dict[str, str]:
    return {"field": field, "message": message}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):
        if e.status_code == 403:
            app.logger.warning("Forbidden: %s request_id=%s", e.message, getattr(g, "request_id", None))
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        # Non-API paths keep werkzeug's default rendering.
        if not request.path.startswith("/api"):
            return e
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def _err_500(e: Exception):
        if isinstance(e, HTTPException):
            return _http_error(e)
        # Ensure stack trace shows in logs.
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"error": "Internal server error"}), 500
