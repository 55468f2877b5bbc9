"""Structured exception hierarchy for consistent error handling.

This module defines the exception system for the Taskhub application. Every
error a client can observe is a ``TaskhubError`` subclass whose ``error_code``
becomes the ``error`` field of the response envelope.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for logging and alerting
- **TaskhubError**: Base exception with context, cause and fingerprinting
- **Specialized exceptions**: One class per error kind (validation, auth, ...)

Stores raise ``DuplicateEntryError`` or let ``SQLAlchemyError`` propagate;
services translate these into the client-facing kinds; the API layer renders
the envelope.
"""

import hashlib
import traceback
from enum import Enum

from src.core.types import ErrorContext, FieldErrors


class ErrorCode(Enum):
    """Standardized error codes rendered in the ``error`` envelope field."""

    BAD_REQUEST = "bad_request"
    """The request was understood but one of its values is not acceptable."""

    VALIDATION_ERROR = "validation_error"
    """Request body validation failed; per-field messages are attached."""

    INVALID_REQUEST = "invalid_request"
    """The request body could not be decoded."""

    INVALID_TASK_ID = "invalid_task_id"
    """A task id path parameter is not a valid UUID."""

    UNAUTHORIZED = "unauthorized"
    """Authentication failed."""

    NOT_FOUND = "not_found"
    """The requested resource does not exist or is not owned by the caller."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    """The route exists but does not accept the HTTP method."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    """The client exhausted its request quota for the current window."""

    REPOSITORY_ERROR = "repository_error"
    """The relational store failed."""

    DUPLICATE_ENTRY = "duplicate_entry"
    """A unique constraint rejected a write."""

    INTERNAL_ERROR = "internal_server_error"
    """An unexpected internal error occurred."""


class Severity(Enum):
    """Severity levels for errors in the Taskhub application."""

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that may affect some features but not critical operations."""

    HIGH = "HIGH"
    """Errors impacting security, data integrity or critical functionality."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class TaskhubError(Exception):
    """Base exception class for all Taskhub application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, safe to show to clients
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error, for logs only
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Capture stack trace at creation time
        self.stack_trace = traceback.format_stack()[:-1]  # Exclude this frame

        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Creates a hash based on the error type and the location where it was
        raised, allowing similar errors to be grouped together in logs.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = (
            self.stack_trace[-max_frames:]
            if len(self.stack_trace) > max_frames
            else self.stack_trace
        )

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"

        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation (LOW or MEDIUM severity)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        """Return a string representation of the exception."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception."""
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(TaskhubError):
    """Exception raised when input validation fails.

    Args:
        message: Description of the validation failure
        error_code: Error code (defaults to VALIDATION_ERROR)
        errors: Optional field name to message map rendered to the client
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        errors: FieldErrors | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)
        self.errors = errors


class NotFoundError(TaskhubError):
    """Exception raised when a requested resource cannot be found.

    Ownership mismatches raise this too, so that callers cannot test for
    other users' resources.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(TaskhubError):
    """Exception raised when authentication fails.

    Args:
        message: Client-facing description of the failure
        error_code: Error code (defaults to UNAUTHORIZED)
        context: Additional context information, e.g. the token failure reason
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class RateLimitError(TaskhubError):
    """Exception raised when a client exceeds its request quota."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.RATE_LIMIT_EXCEEDED,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class RepositoryError(TaskhubError):
    """Exception raised when the relational store fails.

    The message is generic; driver details belong in ``context`` and ``cause``.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.REPOSITORY_ERROR,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class DuplicateEntryError(TaskhubError):
    """Exception raised by a store when a unique constraint rejects a write.

    Args:
        field: Name of the column whose uniqueness was violated
        cause: The original integrity error
    """

    def __init__(self, field: str, cause: Exception | None = None) -> None:
        super().__init__(
            ErrorCode.DUPLICATE_ENTRY,
            f"duplicate value for {field}",
            Severity.LOW,
            {"field": field},
            cause,
        )
        self.field = field
