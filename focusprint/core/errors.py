"""
Application error types.

This module defines the error hierarchy raised by the services and mapped to
JSON responses by the server's exception handlers. Each error carries a
machine-readable type and code, the HTTP status it maps to, and optional
context that is only exposed in development.

It also provides the message-based status mapping used for errors that do not
come from this hierarchy, the database error translation and a few input
validators shared by the services.
"""

from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy.exc import IntegrityError, OperationalError


class ErrorType(str, Enum):
    """Broad category of an application error."""

    validation = "validation"
    authentication = "authentication"
    authorization = "authorization"
    not_found = "not_found"
    conflict = "conflict"
    rate_limit = "rate_limit"
    server_error = "server_error"
    network_error = "network_error"
    database_error = "database_error"


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API callers."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_UUID = "INVALID_UUID"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"
    DATABASE_CONNECTION_ERROR = "DATABASE_CONNECTION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppError(Exception):
    """Base class for errors that map to a known HTTP response."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.server_error,
        code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        status_code: int = 500,
        is_operational: bool = True,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.status_code = status_code
        self.is_operational = is_operational
        self.context = context or {}

    def to_dict(self, include_context: bool = False) -> Dict[str, Any]:
        """Serialize the error into the ``{error, details}`` response body."""
        details: Dict[str, Any] = {"type": self.error_type.value, "code": self.code.value}
        if include_context and self.context:
            details["context"] = self.context
        return {"error": self.message, "details": details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, code={self.code.value}, message={self.message!r})"


class ValidationFailedError(AppError):
    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, ErrorType.validation, code, 400, context=context)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication required", code: ErrorCode = ErrorCode.UNAUTHORIZED) -> None:
        super().__init__(message, ErrorType.authentication, code, 401)


class AuthorizationError(AppError):
    def __init__(
        self,
        message: str = "Insufficient permissions",
        code: ErrorCode = ErrorCode.INSUFFICIENT_PERMISSIONS,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, ErrorType.authorization, code, 403, context=context)


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource", context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"{resource} not found", ErrorType.not_found, ErrorCode.RESOURCE_NOT_FOUND, 404, context=context)
        self.resource = resource


class ConflictError(AppError):
    def __init__(self, message: str = "Resource already exists", context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorType.conflict, ErrorCode.RESOURCE_ALREADY_EXISTS, 409, context=context)


class OperationNotAllowedError(AppError):
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorType.validation, ErrorCode.OPERATION_NOT_ALLOWED, 400, context=context)


class LimitExceededError(AppError):
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorType.validation, ErrorCode.LIMIT_EXCEEDED, 400, context=context)


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests") -> None:
        super().__init__(message, ErrorType.rate_limit, ErrorCode.LIMIT_EXCEEDED, 429)


class DatabaseError(AppError):
    def __init__(
        self,
        message: str = "Database operation failed",
        code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, ErrorType.database_error, code, 500, is_operational=False, context=context)


# Ordered: the first matching pattern decides the status.
MESSAGE_STATUS_PATTERNS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("not found",), 404),
    (("already exists", "duplicate"), 409),
    (("permission", "unauthorized", "forbidden"), 403),
    (("validation failed", "invalid", "required", "cannot"), 400),
    (("connection",), 503),
)


def status_for_message(message: str) -> int:
    """Map an error message to an HTTP status by looking for known substrings.

    Args:
        message: Error message raised by a lower layer

    Returns:
        The HTTP status code, 500 when no pattern matches
    """
    lowered = (message or "").lower()
    for patterns, status_code in MESSAGE_STATUS_PATTERNS:
        if any(pattern in lowered for pattern in patterns):
            return status_code
    return 500


def from_database_error(exc: Exception) -> AppError:
    """Translate a database driver error into an application error.

    Unique violations become conflicts, foreign-key violations become
    validation errors, connection failures and everything else become
    database errors.
    """
    message = str(getattr(exc, "orig", exc) or exc)
    lowered = message.lower()
    if isinstance(exc, IntegrityError):
        if "unique" in lowered or "duplicate" in lowered or "23505" in lowered:
            return ConflictError("Resource already exists", context={"db_error": message})
        if "foreign key" in lowered or "23503" in lowered:
            return ValidationFailedError("Referenced resource does not exist", context={"db_error": message})
        if "not null" in lowered or "23502" in lowered:
            return ValidationFailedError(
                "Missing required field", code=ErrorCode.MISSING_REQUIRED_FIELD, context={"db_error": message}
            )
    if isinstance(exc, OperationalError):
        return DatabaseError(
            "Database connection failed", code=ErrorCode.DATABASE_CONNECTION_ERROR, context={"db_error": message}
        )
    return DatabaseError(context={"db_error": message})


# =====================================================================
# Validators
# =====================================================================

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_required(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise when any of ``fields`` is missing or empty in ``data``."""
    missing = [name for name in fields if data.get(name) in (None, "", [])]
    if missing:
        raise ValidationFailedError(
            f"Missing required fields: {', '.join(missing)}",
            code=ErrorCode.MISSING_REQUIRED_FIELD,
            context={"missing_fields": missing},
        )


def validate_email(email: str) -> str:
    if not email or not EMAIL_PATTERN.match(email):
        raise ValidationFailedError("Invalid email format", code=ErrorCode.INVALID_EMAIL, context={"email": email})
    return email.lower()


def validate_uuid(value: str, field: str = "id") -> str:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationFailedError(f"Invalid UUID format for {field}", code=ErrorCode.INVALID_UUID) from None
    return str(value)


def validate_string_length(value: str, field: str, min_length: int = 0, max_length: Optional[int] = None) -> str:
    length = len(value or "")
    if length < min_length:
        raise ValidationFailedError(f"{field} must be at least {min_length} characters")
    if max_length is not None and length > max_length:
        raise ValidationFailedError(f"{field} must be less than {max_length} characters")
    return value
