from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, ErrorKind, ValidationError
from .datetime_utils import format_rfc3339

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Dataclasses, enums, dates and datetimes into plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_rfc3339(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_jsonable(data)}), status


def error_response(kind: ErrorKind, message: str):
    return jsonify({"success": False, "error": kind.value, "message": message}), kind.http_status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.kind == ErrorKind.INTERNAL:
            logger.error("internal error: %s", exc.message, exc_info=exc)
        return error_response(exc.kind, exc.message)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        # Werkzeug HTTP errors (404 routes, 405) keep their own status.
        code = getattr(exc, "code", None)
        if isinstance(code, int) and code < 500:
            return jsonify({"success": False, "error": "http_error", "message": str(exc)}), code
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return error_response(ErrorKind.INTERNAL, "internal server error")


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def current_staff_id() -> int:
    return int(session["staff_id"])


def current_role() -> Role:
    return Role(session.get("role", Role.STAFF.value))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            raise AuthenticationError("login required")
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            raise AuthenticationError("login required")
        if session.get("role") != Role.ADMIN.value:
            raise AuthorizationError("admin role required")
        return view(*args, **kwargs)

    return wrapper


def device_auth_required(device_auth):
    """Validate X-Device-Key / X-Staff-ID / X-Staff-PIN and expose the result as ``g.device``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.device = device_auth.authenticate(
                api_key=request.headers.get("X-Device-Key", ""),
                staff_id=request.headers.get("X-Staff-ID", ""),
                pin=request.headers.get("X-Staff-PIN", ""),
            )
            return view(*args, **kwargs)

        return wrapper

    return decorator
