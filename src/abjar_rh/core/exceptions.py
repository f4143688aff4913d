from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `field_errors` carries per-field messages for forms validated as a whole.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, field_errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.field_errors = dict(field_errors or {})


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is stale."""

    kind = ErrorKind.UNAUTHENTICATED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.UNAUTHORIZED


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    """Raised when a write collides with an existing row (duplicate key)."""

    kind = ErrorKind.CONFLICT
