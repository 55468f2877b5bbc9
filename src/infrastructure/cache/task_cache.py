"""Read-through cache for task list pages.

Keys have the form ``tasks:<user_id>:<status-or-empty>:<page>:<limit>`` and
hold the JSON encoding of a ``TasksResponse`` for 60 seconds. Every
operation is advisory: a miss, an undecodable value, a missing client or a
Redis error all behave like a miss on read and are ignored on write.
"""

import uuid

import orjson
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis, RedisError

from src.domain.tasks.schemas import TasksResponse
from src.infrastructure.constants import (
    SCAN_BATCH_SIZE,
    TASK_LIST_KEY_PREFIX,
    TASK_LIST_TTL_SECONDS,
)


class TaskListCache:
    """Cache of list responses, scoped per user.

    Args:
        redis: Shared client, or None to disable caching.
        ttl_seconds: Lifetime of cached pages.
    """

    def __init__(
        self, redis: Redis | None, ttl_seconds: int = TASK_LIST_TTL_SECONDS
    ) -> None:
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(user_id: uuid.UUID, status: str | None, page: int, limit: int) -> str:
        return f"{TASK_LIST_KEY_PREFIX}:{user_id}:{status or ''}:{page}:{limit}"

    @staticmethod
    def pattern_for(user_id: uuid.UUID) -> str:
        # user_id is a parsed UUID, so the pattern cannot match other users
        return f"{TASK_LIST_KEY_PREFIX}:{user_id}:*"

    async def get(self, key: str) -> TasksResponse | None:
        """Return the cached page, or None on miss or any failure."""
        if self.redis is None:
            return None

        try:
            raw = await self.redis.get(key)
        except RedisError as e:
            logger.warning("Task list cache read failed: {}", e, cache_key=key)
            return None

        if raw is None:
            logger.debug("Task list cache miss", cache_key=key)
            return None

        try:
            response = TasksResponse.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(
                "Discarding undecodable task list cache entry: {}",
                type(e).__name__,
                cache_key=key,
            )
            return None

        logger.debug("Task list cache hit", cache_key=key)
        return response

    async def set(self, key: str, value: TasksResponse) -> None:
        """Store a page; failures are logged and ignored."""
        if self.redis is None:
            return

        payload = orjson.dumps(value.model_dump(mode="json"))
        try:
            await self.redis.set(key, payload, ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning("Task list cache write failed: {}", e, cache_key=key)

    async def invalidate(self, user_id: uuid.UUID) -> int:
        """Delete every cached page of ``user_id``.

        Keys are found with a cursor-based SCAN, so pages written while the
        scan runs may survive until their TTL expires.

        Returns:
            int: Number of keys deleted.
        """
        if self.redis is None:
            return 0

        deleted = 0
        try:
            async for key in self.redis.scan_iter(
                match=self.pattern_for(user_id), count=SCAN_BATCH_SIZE
            ):
                deleted += await self.redis.delete(key)
        except RedisError as e:
            logger.warning(
                "Task list cache invalidation failed: {}", e, user_id=str(user_id)
            )
            return deleted

        logger.debug(
            "Invalidated {} task list cache keys", deleted, user_id=str(user_id)
        )
        return deleted
