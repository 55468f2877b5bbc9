"""Global exception handlers for the FastAPI application.

This module provides centralized exception handling for all API endpoints,
ensuring every failure is rendered as the error envelope and logged with
sanitized context. Client-facing messages are stable strings; details such
as token failure reasons or driver errors only reach the logs.
"""

from collections.abc import Iterable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import (
    INTERNAL_ERROR_MESSAGE,
    INVALID_JSON_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
)
from src.api.utils.responses import error_response
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    ErrorCode,
    NotFoundError,
    RateLimitError,
    TaskhubError,
    UnauthorizedError,
    ValidationError,
)
from src.core.types import FieldErrors
from src.domain.tasks.models import TaskStatus

# Errors whose location is the body itself rather than one of its fields
BODY_ERROR_TYPES = frozenset(
    {"json_invalid", "json_type", "model_attributes_type", "dict_type"}
)


def status_code_for(exc: TaskhubError) -> int:
    """Map an application exception to its HTTP status code."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, RateLimitError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def field_message(error: dict[str, Any]) -> str:
    """Translate one pydantic error into a client-facing field message."""
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return "This field is required"
    if error_type == "string_too_long":
        return f"This field exceeds maximum length of {ctx.get('max_length')}"
    if error_type == "string_too_short":
        min_length = ctx.get("min_length")
        if min_length == 1:
            return "This field is required"
        return f"This field must be at least {min_length} characters"
    if error_type == "value_error" and "email" in str(error.get("msg", "")):
        return "This field must be a valid email"
    if error_type in {"enum", "literal_error"}:
        return f"This field must be one of: {TaskStatus.choices()}"
    return "This field is invalid"


def collect_field_errors(errors: Iterable[dict[str, Any]]) -> FieldErrors:
    """Build the field name to message map, keeping the first error per field."""
    field_errors: FieldErrors = {}
    for error in errors:
        # Drop the leading "body"/"query" segment, e.g. ('body', 'email')
        field_path = error.get("loc", ())[1:]
        field_name = ".".join(str(loc) for loc in field_path) or "body"
        field_errors.setdefault(field_name, field_message(error))
    return field_errors


def _is_body_error(error: dict[str, Any]) -> bool:
    loc = error.get("loc", ())
    return error.get("type") in BODY_ERROR_TYPES or (
        len(loc) == 1 and loc[0] == "body"
    )


def render_taskhub_error(
    request: Request, exc: TaskhubError, headers: dict[str, str] | None = None
) -> Response:
    """Log an application error and render it as the error envelope.

    Also used by middleware that reject a request before it reaches the
    routes, where exception handlers do not apply.

    Args:
        request: The request that caused the error
        exc: The error to render
        headers: Extra response headers

    Returns:
        Response: The error envelope
    """
    status_code = status_code_for(exc)
    user_id = RequestContext.get_user_id()
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
        },
    )

    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=status_code,
        correlation_id=RequestContext.get_correlation_id(),
        user_id=str(user_id) if user_id else None,
        **error_context,
    )

    errors = exc.errors if isinstance(exc, ValidationError) else None
    return error_response(
        status_code, exc.error_code, exc.message, errors=errors, headers=headers
    )


async def taskhub_error_handler(request: Request, exc: Exception) -> Response:
    """Handle TaskhubError exceptions.

    Raises:
        TypeError: If exc is not a TaskhubError instance
    """
    if not isinstance(exc, TaskhubError):
        raise TypeError(f"Expected TaskhubError, got {type(exc).__name__}")

    return render_taskhub_error(request, exc)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Malformed or non-object bodies become ``invalid_request``; field failures
    become ``validation_error`` with one message per field.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    errors = list(exc.errors())
    correlation_id = RequestContext.get_correlation_id()

    if any(_is_body_error(error) for error in errors):
        logger.warning(
            "Request body could not be decoded",
            correlation_id=correlation_id,
            path=str(request.url.path),
            method=request.method,
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_REQUEST.value,
            INVALID_JSON_MESSAGE,
        )

    field_errors = collect_field_errors(errors)
    logger.warning(
        "Request validation failed",
        correlation_id=correlation_id,
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        method=request.method,
        validation_errors=field_errors,
    )

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.VALIDATION_ERROR.value,
        VALIDATION_FAILED_MESSAGE,
        errors=field_errors,
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException, mostly unknown routes and wrong methods.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code = ErrorCode.NOT_FOUND.value
        message = "Resource not found"
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        error_code = ErrorCode.METHOD_NOT_ALLOWED.value
        message = "Method not allowed"
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error_code = ErrorCode.UNAUTHORIZED.value
        message = str(exc.detail)
    elif exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        error_code = ErrorCode.BAD_REQUEST.value
        message = str(exc.detail)
    else:
        error_code = ErrorCode.INTERNAL_ERROR.value
        message = INTERNAL_ERROR_MESSAGE

    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        status=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
    )

    return error_response(
        exc.status_code,
        error_code,
        message,
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions that escaped every other layer.

    The response never carries exception details; they are logged with the
    stack trace instead.
    """
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )

    logger.opt(exception=exc).error(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        severity="CRITICAL",
        **error_context,
    )

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR.value,
        INTERNAL_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(TaskhubError, taskhub_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
