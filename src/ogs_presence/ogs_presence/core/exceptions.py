from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed classification of failures; the HTTP layer maps it to a status code."""

    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = ErrorKind.INVALID_REQUEST


class AuthenticationError(DomainError):
    """Raised when login or device credentials are invalid."""

    kind = ErrorKind.UNAUTHORIZED


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    """Raised when an action collides with the current state (double check-in, overlaps)."""

    kind = ErrorKind.CONFLICT


class InternalError(DomainError):
    kind = ErrorKind.INTERNAL
