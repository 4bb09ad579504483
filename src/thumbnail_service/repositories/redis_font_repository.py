"""Redis implementation of FontStore.

Stores each font as a plain binary string under "font:{family}:{weight}".
Fonts are content-immutable, so entries carry no TTL.
"""

import asyncio
import logging

import redis

from thumbnail_service.config import get_redis_client
from thumbnail_service.entities import FontKey

logger = logging.getLogger(__name__)


class RedisFontRepository:
    """Redis-backed persistent font tier.

    This class satisfies the FontStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, redis_client: redis.Redis | None = None, prefix: str = "font") -> None:
        """Initialize the Redis font repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            prefix: Key prefix for stored fonts.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix

    @classmethod
    def create(cls, prefix: str = "font") -> "RedisFontRepository":
        """Factory method to create RedisFontRepository with defaults.

        Args:
            prefix: Key prefix for stored fonts.

        Returns:
            Configured RedisFontRepository
        """
        return cls(prefix=prefix)

    def key_for(self, key: FontKey) -> str:
        return f"{self._prefix}:{key.family}:{key.weight}"

    def initialize(self) -> None:
        """Verify the Redis connection.

        Raises:
            redis.RedisError: If Redis is unreachable
        """
        self._client.ping()

    async def get(self, key: FontKey) -> bytes | None:
        try:
            value = await asyncio.to_thread(self._client.get, self.key_for(key))
        except redis.RedisError as e:
            logger.warning("Could not read cached font %s from Redis: %s", key, e)
            return None
        return bytes(value) if value is not None else None

    async def put(self, key: FontKey, data: bytes) -> None:
        """Store font bytes.

        Raises:
            OSError: If Redis rejects the write
        """
        try:
            await asyncio.to_thread(self._client.set, self.key_for(key), data)
        except redis.RedisError as e:
            raise OSError(f"Redis write failed for {key}: {e}") from e

    def count_all(self) -> int:
        count = 0
        for _ in self._client.scan_iter(match=f"{self._prefix}:*"):
            count += 1
        return count

    def size_bytes(self) -> int:
        total = 0
        for redis_key in self._client.scan_iter(match=f"{self._prefix}:*"):
            total += self._client.strlen(redis_key)
        return total

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False
