"""HTTP access logging with slow request detection.

One line is logged per request with method, path, query, status, latency,
client IP and user agent. Responses with a status of 400 or above are logged
at ``error`` level, everything else at ``info``. Requests slower than
``LOG_SLOW_REQUEST_THRESHOLD_MS`` get an extra warning. Paths listed in
``LOG_EXCLUDED_PATHS`` are not logged.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.api.constants import REQUEST_ID_HEADER
from src.api.utils.requests import get_client_ip, get_user_agent
from src.core.config import LogConfig, get_settings
from src.core.constants import MILLISECONDS_PER_SECOND
from src.core.context import generate_request_id


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
    """

    def __init__(self, app: ASGIApp, *, log_config: LogConfig) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = set(log_config.excluded_paths)
        self.settings = get_settings()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log details.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.

        Raises:
            Exception: Any exception raised by the application is re-raised
                after logging.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        client_ip = get_client_ip(
            request, trust_proxy_headers=self.settings.is_production
        )

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip,
            user_agent=get_user_agent(request),
        ):
            start_time = time.perf_counter()
            query = str(request.url.query) or None

            try:
                response = await call_next(request)
            except Exception as exc:
                elapsed = time.perf_counter() - start_time
                duration_ms = elapsed * MILLISECONDS_PER_SECOND
                logger.error(
                    "Request failed",
                    query=query,
                    duration_ms=round(duration_ms, 2),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
            log = (
                logger.error
                if response.status_code >= status.HTTP_400_BAD_REQUEST
                else logger.info
            )
            log(
                "{} {} {} {:.2f}ms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                query=query,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
