"""Redis sliding window rate limiter implementation.

Uses Redis sorted sets (ZSET) for accurate sliding window rate limiting.
More accurate than fixed windows and prevents burst abuse at window boundaries.
"""

import time
import uuid
from dataclasses import dataclass

from promption.core.cache.redis import redis_client


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: int | None = None

    def headers(self) -> dict[str, str]:
        """Standard ``X-RateLimit-*`` headers describing this result."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_time),
        }
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class SlidingWindowRateLimiter:
    """Redis-based sliding window rate limiter.

    Uses sorted sets to track requests within a sliding time window.
    Each request is stored with its timestamp as the score, allowing
    efficient cleanup of old entries and accurate counting.
    """

    def __init__(self, prefix: str = "ratelimit") -> None:
        """Initialize the rate limiter.

        Args:
            prefix: Key prefix for Redis keys
        """
        self.prefix = prefix

    def _build_key(self, identifier: str, endpoint: str | None = None) -> str:
        """Build a Redis key for the rate limit.

        Args:
            identifier: User subject or IP address
            endpoint: Optional endpoint path for per-route limits

        Returns:
            Redis key string
        """
        if endpoint:
            endpoint_key = endpoint.replace("/", "_").strip("_")
            return f"{self.prefix}:{identifier}:{endpoint_key}"
        return f"{self.prefix}:{identifier}"

    async def is_allowed(
        self,
        identifier: str,
        limit: int,
        window: int,
        endpoint: str | None = None,
    ) -> RateLimitResult:
        """Check if a request is allowed under the rate limit.

        Uses a sliding window algorithm:
        1. Remove entries older than (now - window)
        2. Add current request timestamp
        3. Count entries in the window
        4. Allow if count <= limit

        Args:
            identifier: User subject or IP address to rate limit
            limit: Maximum number of requests allowed in the window
            window: Time window in seconds
            endpoint: Optional endpoint for per-route limits

        Returns:
            RateLimitResult with allowed status and metadata

        Raises:
            RedisError: If Redis is unreachable
        """
        key = self._build_key(identifier, endpoint)
        now = time.time()
        window_start = now - window
        member = f"{now}:{uuid.uuid4().hex[:8]}"

        async with redis_client() as client, client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zadd(key, {member: now})
            pipe.zcard(key)
            pipe.expire(key, window)

            results = await pipe.execute()
            count = results[2]

        allowed = count <= limit
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_time=int(now + window),
            retry_after=None if allowed else window,
        )

    async def reset(self, identifier: str, endpoint: str | None = None) -> bool:
        """Reset rate limit for an identifier.

        Returns:
            True if key was deleted
        """
        key = self._build_key(identifier, endpoint)
        async with redis_client() as client:
            result = await client.delete(key)
            return result > 0


# Global rate limiter instance
rate_limiter = SlidingWindowRateLimiter()
