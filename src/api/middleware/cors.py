"""Permissive CORS headers for browser clients.

Every response allows any origin with the methods and headers the API
uses. Preflight ``OPTIONS`` requests are answered directly with 204 and
never reach the rate limiter or the routes.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.constants import (
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    CORS_ALLOW_ORIGIN,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
}


class CORSMiddleware(BaseHTTPMiddleware):
    """Middleware that adds CORS headers and short-circuits preflight requests."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(
                status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS
            )

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
