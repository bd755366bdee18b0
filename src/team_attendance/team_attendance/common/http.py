from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    TooEarlyError,
    ValidationError,
)
from .logging import get_logger

log = get_logger(__name__)

# Most specific first.
_STATUS_BY_ERROR = (
    (TooEarlyError, 425, "TOO_EARLY"),
    (ValidationError, 400, "VALIDATION"),
    (NotFoundError, 404, "NOT_FOUND"),
    (AuthenticationError, 401, "UNAUTHENTICATED"),
    (AuthorizationError, 403, "FORBIDDEN"),
    (ConflictError, 409, "CONFLICT"),
    (DomainError, 400, "DOMAIN"),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in first", "code": "UNAUTHENTICATED"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def error_response(exc: DomainError):
    for error_type, status, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            payload = {"success": False, "message": str(exc), "code": code}
            if isinstance(exc, TooEarlyError):
                payload["occurrence"] = {
                    "occurrence_id": exc.occurrence_id,
                    "title": exc.title,
                    "start_time": exc.start_time,
                    "starts_at": exc.starts_at.isoformat(),
                }
            return jsonify(payload), status
    return jsonify({"success": False, "message": str(exc)}), 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return error_response(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        log.exception("unhandled_error", path=request.path, method=request.method)
        return jsonify({"success": False, "message": "Internal server error", "code": "INTERNAL"}), 500
