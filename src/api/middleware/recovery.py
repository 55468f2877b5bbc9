"""Turn any exception escaping the inner layers into a 500 envelope.

Exceptions known to the application are rendered by the exception handlers
before they reach this layer; whatever arrives here is unexpected. It is
logged with its stack trace and sanitized request context, and the client
only sees the generic internal error message.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.constants import INTERNAL_ERROR_MESSAGE
from src.api.utils.responses import error_response
from src.core.error_context import sanitize_error_context
from src.core.exceptions import ErrorCode


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Middleware that converts unhandled exceptions into the error envelope."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001 - last line of defence for requests
            error_context = sanitize_error_context(
                exc,
                {
                    "request_method": request.method,
                    "request_path": str(request.url.path),
                },
            )
            logger.opt(exception=exc).error(
                "Recovered from unhandled exception: {}",
                type(exc).__name__,
                severity="CRITICAL",
                **error_context,
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                ErrorCode.INTERNAL_ERROR.value,
                INTERNAL_ERROR_MESSAGE,
            )
