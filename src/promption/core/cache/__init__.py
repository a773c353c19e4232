"""Redis access for rate limiting and the IP block list."""

from promption.core.cache.redis import (
    RedisCache,
    close_redis_pool,
    ping,
    redis_client,
)


__all__ = [
    "RedisCache",
    "close_redis_pool",
    "ping",
    "redis_client",
]
