"""Redis client configuration and connection management.

Provides an async Redis client with connection pooling for rate
limiting and the IP block list.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from promption.config import settings


class RedisPoolHolder:
    """Holder for the shared Redis connection pool."""

    pool: ConnectionPool | None = None


def _get_pool() -> ConnectionPool:
    """Get or create the Redis connection pool."""
    if RedisPoolHolder.pool is None:
        RedisPoolHolder.pool = ConnectionPool.from_url(
            str(settings.redis_url),
            max_connections=50,
            decode_responses=True,
            socket_timeout=settings.redis_timeout,
            socket_connect_timeout=settings.redis_timeout,
        )
    return RedisPoolHolder.pool


@asynccontextmanager
async def redis_client() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """Context manager for Redis client.

    Usage:
        async with redis_client() as client:
            await client.set("key", "value")
    """
    client = redis.Redis(connection_pool=_get_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    """Close the Redis connection pool.

    Call this during application shutdown.
    """
    if RedisPoolHolder.pool is not None:
        await RedisPoolHolder.pool.disconnect()
        RedisPoolHolder.pool = None


async def ping() -> bool:
    """Return True if Redis answers a PING."""
    async with redis_client() as client:
        return bool(await client.ping())


class RedisCache:
    """Small keyed store over Redis with a common key prefix."""

    def __init__(self, prefix: str = "") -> None:
        """Initialize cache with optional key prefix.

        Args:
            prefix: Prefix for all keys (e.g., "ip_block:")
        """
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}" if self.prefix else key

    async def get(self, key: str) -> str | None:
        async with redis_client() as client:
            return await client.get(self._key(key))

    async def set(
        self,
        key: str,
        value: str,
        ttl_seconds: int | None = None,
    ) -> None:
        """Set a value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Optional TTL in seconds
        """
        async with redis_client() as client:
            if ttl_seconds:
                await client.setex(self._key(key), ttl_seconds, value)
            else:
                await client.set(self._key(key), value)

    async def delete(self, key: str) -> bool:
        """Delete a key; True if it existed."""
        async with redis_client() as client:
            result = await client.delete(self._key(key))
            return result > 0

    async def exists(self, key: str) -> bool:
        async with redis_client() as client:
            return await client.exists(self._key(key)) > 0

    async def incr(self, key: str, amount: int = 1, ttl_seconds: int | None = None) -> int:
        """Increment a counter, starting its TTL on first write.

        Args:
            key: Counter key
            amount: Increment
            ttl_seconds: Expiry applied when the counter is created

        Returns:
            The counter value after incrementing
        """
        async with redis_client() as client:
            value = await client.incrby(self._key(key), amount)
            if ttl_seconds and value == amount:
                await client.expire(self._key(key), ttl_seconds)
            return value
