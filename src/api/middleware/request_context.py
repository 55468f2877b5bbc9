"""Request context middleware for correlation IDs.

The correlation ID is read from ``X-Correlation-ID`` or generated, stored in
a context variable, bound to every log line emitted while the request runs
and echoed back in the response. The authenticated user id is stored in the
same context by the auth dependency and cleared when the request ends.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER
from src.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to manage request context and correlation IDs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with correlation ID header.
        """
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        try:
            # contextualize cleans the binding up when the request ends
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.clear()
