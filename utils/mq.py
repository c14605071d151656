"""
Redis list wrapper used as the person work queue.

Items are popped destructively from the tail of a single list; there is no
acknowledgement step.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from utils.config import settings

logger = logging.getLogger(__name__)


class RedisQueue:
    """Destructive pop-one-item access to a Redis list."""

    def __init__(self, queue_name: Optional[str] = None, redis_url: Optional[str] = None) -> None:
        """Initialize Redis queue.

        Args:
            queue_name: Redis list key, defaults to settings.QUEUE_NAME
            redis_url: Redis connection URL, defaults to settings.REDIS_URL
        """
        self.queue_name = queue_name or settings.QUEUE_NAME
        self.redis_url = redis_url or settings.REDIS_URL
        self.client: Optional[redis.Redis] = None

    @retry(
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def connect(self) -> None:
        """Create the client and verify the server is reachable.

        Raises:
            redis.ConnectionError: If Redis is unreachable after retries
        """
        if self.client is None:
            self.client = redis.from_url(
                self.redis_url,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=False,  # Handle bytes for orjson
            )

        await self.client.ping()
        logger.info("Connected to Redis", extra={"queue": self.queue_name})

    async def pop(self) -> Optional[bytes]:
        """Remove and return the item at the tail of the list.

        Returns:
            Raw payload bytes, or None when the list is empty

        Raises:
            redis.RedisError: If the pop fails
        """
        if self.client is None:
            await self.connect()

        return await self.client.rpop(self.queue_name)

    async def close(self) -> None:
        """Close Redis connection and cleanup resources."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Redis connection closed", extra={"queue": self.queue_name})
