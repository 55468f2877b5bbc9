"""Redis connection lifecycle.

A single pooled client is shared by the process, following the same
singleton-manager pattern as the database engine. If Redis cannot be reached
at startup the manager logs the failure and keeps no client; callers receive
``None`` from ``get_redis()`` and skip caching and rate limiting.
"""

from loguru import logger
from redis.asyncio import Redis, RedisError

from src.core.config import RedisConfig, get_settings


def create_redis_client(config: RedisConfig) -> Redis:
    """Build a pooled client; no connection is opened until first use."""
    return Redis(
        host=config.host,
        port=config.port,
        password=config.password or None,
        db=config.db,
        max_connections=config.pool_size,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.connect_timeout,
        decode_responses=True,
    )


class _RedisManager:
    """Internal holder of the process-wide Redis client."""

    def __init__(self) -> None:
        self._client: Redis | None = None

    @property
    def client(self) -> Redis | None:
        return self._client

    async def connect(self, config: RedisConfig | None = None) -> Redis | None:
        """Create the client and ping it; keep it only if the ping succeeds."""
        if self._client is not None:
            return self._client

        config = config or get_settings().redis_config
        client = create_redis_client(config)
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.error(
                "Redis unavailable at {}:{} - running without cache: {}",
                config.host,
                config.port,
                e,
            )
            await client.aclose()
            return None

        logger.info("Connected to Redis at {}:{}", config.host, config.port)
        self._client = client
        return client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("Redis connection closed")
            self._client = None

    def set_client(self, client: Redis | None) -> None:
        """Install an already-configured client. Used by tests and the worker."""
        self._client = client


_redis_manager = _RedisManager()


def get_redis() -> Redis | None:
    """Return the shared client, or None when Redis is unavailable."""
    return _redis_manager.client


async def connect_redis(config: RedisConfig | None = None) -> Redis | None:
    return await _redis_manager.connect(config)


async def close_redis() -> None:
    await _redis_manager.close()
