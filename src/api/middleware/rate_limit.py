"""Per-client-IP request quotas.

Every response that passes through this layer carries ``X-RateLimit-Limit``,
``X-RateLimit-Remaining`` and ``X-RateLimit-Reset``. When the quota is
exhausted the request is answered with 429 without reaching the routes.

The Redis client is resolved per request so that a client connected during
startup is picked up. Without Redis, requests pass through unchecked unless
``RATE_LIMIT_LOCAL_FALLBACK`` enables the in-process token bucket.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.api.constants import RATE_LIMIT_MESSAGE
from src.api.middleware.error_handler import render_taskhub_error
from src.api.utils.requests import get_client_ip
from src.core.config import RateLimitConfig, get_settings
from src.core.exceptions import RateLimitError
from src.infrastructure.cache.client import get_redis
from src.infrastructure.cache.rate_limiter import (
    InMemoryRateLimiter,
    RateLimiter,
    RateLimitResult,
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware enforcing a fixed request quota per client IP.

    Args:
        app: The ASGI application.
        config: Rate limiter configuration.
        redis_provider: Callable returning the shared Redis client or None.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        config: RateLimitConfig,
        redis_provider: Callable[[], Redis | None] = get_redis,
    ) -> None:
        super().__init__(app)
        self.config = config
        self.redis_provider = redis_provider
        self.trust_proxy_headers = get_settings().is_production
        self._local = (
            InMemoryRateLimiter(config.requests, config.window)
            if config.local_fallback
            else None
        )

    async def _check(self, client_ip: str) -> RateLimitResult | None:
        redis = self.redis_provider()
        if redis is not None:
            limiter = RateLimiter(redis, self.config.requests, self.config.window)
            return await limiter.check(client_ip)
        if self._local is not None:
            return await self._local.check(client_ip)
        return None

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        client_ip = get_client_ip(request, trust_proxy_headers=self.trust_proxy_headers)
        result = await self._check(client_ip)
        if result is None:
            return await call_next(request)

        if not result.allowed:
            message = RATE_LIMIT_MESSAGE.format(
                limit=self.config.requests, window=self.config.window
            )
            error = RateLimitError(message, context={"client_ip": client_ip})
            return render_taskhub_error(request, error, headers=result.headers)

        response = await call_next(request)
        response.headers.update(result.headers)
        return response
