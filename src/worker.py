"""Out-of-process task list cache invalidation.

The worker subscribes to the ``tasks:invalidate`` channel. Each message
carries a user id; the worker deletes that user's cached list pages. The API
already invalidates inline after every write, so the worker only serves
invalidation requests published by other processes.

Run with ``taskhub-worker``; ``SIGINT`` or ``SIGTERM`` stops it cleanly.
"""

import asyncio
import signal
import uuid
from typing import Final

from loguru import logger
from redis.asyncio import Redis, RedisError

from src.core.config import get_settings
from src.core.logging import setup_logging
from src.infrastructure.cache.client import close_redis, connect_redis
from src.infrastructure.cache.task_cache import TaskListCache

INVALIDATION_CHANNEL: Final[str] = "tasks:invalidate"
POLL_TIMEOUT_SECONDS: Final[float] = 1.0


class InvalidationWorker:
    """Consume invalidation requests from Redis pub/sub.

    Args:
        redis: Connected Redis client.
        channel: Channel to subscribe to.
    """

    def __init__(self, redis: Redis, channel: str = INVALIDATION_CHANNEL) -> None:
        self.redis = redis
        self.channel = channel
        self.cache = TaskListCache(redis)

    async def handle_message(self, payload: str) -> int:
        """Invalidate the cache of the user named by ``payload``.

        Returns:
            int: Number of cache keys deleted; 0 for an invalid payload.
        """
        try:
            user_id = uuid.UUID(payload.strip())
        except ValueError:
            logger.warning("Ignoring invalid invalidation payload", payload=payload)
            return 0

        deleted = await self.cache.invalidate(user_id)
        logger.info(
            "Processed invalidation request", user_id=str(user_id), deleted=deleted
        )
        return deleted

    async def run(self, stop_event: asyncio.Event) -> None:
        """Process messages until ``stop_event`` is set."""
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(self.channel)
        logger.info("Subscribed to {}", self.channel)

        try:
            while not stop_event.is_set():
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=POLL_TIMEOUT_SECONDS
                )
                if message is None:
                    continue
                await self.handle_message(str(message["data"]))
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            logger.info("Unsubscribed from {}", self.channel)


async def run_worker() -> int:
    """Connect to Redis and run the worker until a stop signal arrives.

    Returns:
        int: Process exit code.
    """
    redis = await connect_redis()
    if redis is None:
        logger.critical("Invalidation worker requires Redis")
        return 1

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await InvalidationWorker(redis).run(stop_event)
    except RedisError as e:
        logger.opt(exception=e).error("Invalidation worker lost its Redis connection")
        return 1
    finally:
        await close_redis()

    logger.info("Invalidation worker stopped")
    return 0


def main() -> None:
    """Entry point of the ``taskhub-worker`` script."""
    setup_logging(get_settings())
    raise SystemExit(asyncio.run(run_worker()))


if __name__ == "__main__":
    main()
