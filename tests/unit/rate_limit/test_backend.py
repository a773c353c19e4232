"""Tests for rate limiting backend."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from promption.core.rate_limit.backend import RateLimitResult, SlidingWindowRateLimiter


def mock_redis_pipeline(count: int) -> MagicMock:
    """Patch target for ``redis_client`` whose pipeline reports ``count``."""
    # Pipeline commands are buffered, only execute() is awaited
    mock_pipeline = MagicMock()
    mock_pipeline.execute = AsyncMock(return_value=[0, True, count, True])
    mock_pipeline.__aenter__ = AsyncMock(return_value=mock_pipeline)
    mock_pipeline.__aexit__ = AsyncMock(return_value=None)

    mock_client = MagicMock()
    mock_client.pipeline = MagicMock(return_value=mock_pipeline)

    mock_redis = MagicMock()
    mock_redis.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_redis.return_value.__aexit__ = AsyncMock(return_value=None)
    return mock_redis


class TestSlidingWindowRateLimiter:
    """Tests for SlidingWindowRateLimiter class."""

    def test_build_key_basic(self):
        limiter = SlidingWindowRateLimiter(prefix="ratelimit")
        assert limiter._build_key("user:123") == "ratelimit:user:123"

    def test_build_key_with_endpoint(self):
        """Path separators are flattened into the key."""
        limiter = SlidingWindowRateLimiter(prefix="ratelimit")
        key = limiter._build_key("ip:10.0.0.1", "/api/v1/invitations/abc/accept")
        assert key == "ratelimit:ip:10.0.0.1:api_v1_invitations_abc_accept"

    def test_build_key_custom_prefix(self):
        limiter = SlidingWindowRateLimiter(prefix="custom")
        assert limiter._build_key("ip:192.168.1.1") == "custom:ip:192.168.1.1"

    @pytest.mark.asyncio
    async def test_is_allowed_under_limit(self):
        """Test that requests under limit are allowed."""
        limiter = SlidingWindowRateLimiter()

        with patch(
            "promption.core.rate_limit.backend.redis_client", mock_redis_pipeline(1)
        ):
            result = await limiter.is_allowed(identifier="user:123", limit=30, window=60)

        assert result.allowed is True
        assert result.limit == 30
        assert result.remaining == 29
        assert result.retry_after is None

    @pytest.mark.asyncio
    async def test_is_allowed_at_limit(self):
        """The request that reaches the limit exactly is still allowed."""
        limiter = SlidingWindowRateLimiter()

        with patch(
            "promption.core.rate_limit.backend.redis_client", mock_redis_pipeline(30)
        ):
            result = await limiter.is_allowed(identifier="user:123", limit=30, window=60)

        assert result.allowed is True
        assert result.remaining == 0

    @pytest.mark.asyncio
    async def test_is_allowed_over_limit(self):
        """Test that requests over limit are denied."""
        limiter = SlidingWindowRateLimiter()

        with patch(
            "promption.core.rate_limit.backend.redis_client", mock_redis_pipeline(31)
        ):
            result = await limiter.is_allowed(identifier="user:123", limit=30, window=60)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.retry_after == 60


class TestRateLimitResult:
    """Tests for RateLimitResult dataclass."""

    def test_allowed_headers(self):
        result = RateLimitResult(allowed=True, limit=30, remaining=25, reset_time=1234567890)

        assert result.headers() == {
            "X-RateLimit-Limit": "30",
            "X-RateLimit-Remaining": "25",
            "X-RateLimit-Reset": "1234567890",
        }

    def test_denied_headers_include_retry_after(self):
        result = RateLimitResult(
            allowed=False,
            limit=30,
            remaining=0,
            reset_time=1234567890,
            retry_after=60,
        )

        assert result.headers()["Retry-After"] == "60"
