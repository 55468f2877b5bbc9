"""Per-client request quotas.

``RateLimiter`` implements a fixed window in Redis: the key
``rate_limit:<client-ip>`` counts requests and expires after the window. The
count is read first; a client already at the limit is rejected, otherwise
the counter is incremented and its expiry refreshed in one pipelined
round-trip. Because the read and the increment are separate, bursts may
overshoot the limit slightly. When Redis fails the request is admitted.

``InMemoryRateLimiter`` is a single-process token bucket used only when
Redis is unavailable and ``RATE_LIMIT_LOCAL_FALLBACK`` is enabled.
"""

import threading
import time
from dataclasses import dataclass

from loguru import logger
from redis.asyncio import Redis, RedisError

from src.infrastructure.constants import RATE_LIMIT_KEY_PREFIX


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of a quota check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Requests allowed per window.
        remaining: Requests left in the current window.
        reset: Absolute epoch second at which the window resets.
    """

    allowed: bool
    limit: int
    remaining: int
    reset: int

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }


class RateLimiter:
    """Fixed-window counter stored in Redis.

    Args:
        redis: Shared Redis client.
        limit: Requests allowed per window.
        window_seconds: Window length.
    """

    def __init__(self, redis: Redis, limit: int, window_seconds: int) -> None:
        self.redis = redis
        self.limit = limit
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(client_ip: str) -> str:
        return f"{RATE_LIMIT_KEY_PREFIX}:{client_ip}"

    def _admit_without_store(self, now: int) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self.limit,
            remaining=self.limit,
            reset=now + self.window_seconds,
        )

    async def check(self, client_ip: str) -> RateLimitResult:
        """Count a request from ``client_ip`` against its quota."""
        key = self.key_for(client_ip)
        now = int(time.time())

        try:
            async with self.redis.pipeline(transaction=False) as pipe:
                pipe.get(key)
                pipe.ttl(key)
                raw_count, ttl = await pipe.execute()

            count = int(raw_count or 0)
            if count >= self.limit:
                reset = now + (ttl if ttl and ttl > 0 else self.window_seconds)
                logger.warning(
                    "Rate limit exceeded",
                    client_ip=client_ip,
                    count=count,
                    limit=self.limit,
                )
                return RateLimitResult(
                    allowed=False, limit=self.limit, remaining=0, reset=reset
                )

            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, self.window_seconds)
                new_count, _ = await pipe.execute()
        except (RedisError, ValueError) as e:
            logger.warning("Rate limiter unavailable, admitting request: {}", e)
            return self._admit_without_store(now)

        return RateLimitResult(
            allowed=True,
            limit=self.limit,
            remaining=max(self.limit - int(new_count), 0),
            reset=now + self.window_seconds,
        )


@dataclass(slots=True)
class _Bucket:
    tokens: float
    updated_at: float


class InMemoryRateLimiter:
    """Token bucket per client IP, held in process memory.

    Capacity equals ``limit`` and tokens refill at ``limit / window_seconds``
    per second. Not shared between processes.

    A bucket left idle for a whole window has refilled to capacity and is
    indistinguishable from a fresh one, so such buckets are evicted at most
    once per window.
    """

    def __init__(self, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._rate = limit / window_seconds
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.monotonic()

    def _evict_idle(self, now: float) -> None:
        """Drop buckets untouched for at least one window. Caller holds the lock."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        cutoff = now - self.window_seconds
        idle = [ip for ip, b in self._buckets.items() if b.updated_at <= cutoff]
        for ip in idle:
            del self._buckets[ip]

    async def check(self, client_ip: str) -> RateLimitResult:
        now = time.monotonic()
        with self._lock:
            self._evict_idle(now)
            bucket = self._buckets.get(client_ip)
            if bucket is None:
                bucket = _Bucket(tokens=float(self.limit), updated_at=now)
                self._buckets[client_ip] = bucket
            else:
                elapsed = now - bucket.updated_at
                refilled = bucket.tokens + elapsed * self._rate
                bucket.tokens = min(float(self.limit), refilled)
                bucket.updated_at = now

            allowed = bucket.tokens >= 1
            if allowed:
                bucket.tokens -= 1
            remaining = int(bucket.tokens)
            seconds_to_full = (self.limit - bucket.tokens) / self._rate

        return RateLimitResult(
            allowed=allowed,
            limit=self.limit,
            remaining=remaining,
            reset=int(time.time() + seconds_to_full),
        )
