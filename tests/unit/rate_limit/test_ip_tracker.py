"""Tests for the Redis-backed IP block list."""

from unittest.mock import AsyncMock

import pytest

from promption.core.constants import HONEYPOT_SUSPICION_WEIGHT
from promption.core.rate_limit.ip_tracker import IPTracker


@pytest.fixture
def tracker() -> IPTracker:
    tracker = IPTracker(block_seconds=3600, threshold=5)
    tracker.blocks = AsyncMock()
    tracker.strikes = AsyncMock()
    return tracker


class TestIPTracker:
    async def test_is_blocked_reads_block_list(self, tracker: IPTracker):
        tracker.blocks.exists.return_value = True

        assert await tracker.is_blocked("203.0.113.7") is True
        tracker.blocks.exists.assert_awaited_once_with("203.0.113.7")

    async def test_block_sets_expiring_entry(self, tracker: IPTracker):
        await tracker.block("203.0.113.7", reason="manual")

        tracker.blocks.set.assert_awaited_once_with(
            "203.0.113.7", "manual", ttl_seconds=3600
        )

    async def test_violation_below_threshold_does_not_block(self, tracker: IPTracker):
        tracker.strikes.incr.return_value = 4

        assert await tracker.record_violation("203.0.113.7") is False
        tracker.blocks.set.assert_not_awaited()

    async def test_violation_at_threshold_blocks(self, tracker: IPTracker):
        tracker.strikes.incr.return_value = 5

        assert await tracker.record_violation("203.0.113.7") is True
        tracker.blocks.set.assert_awaited_once_with(
            "203.0.113.7", "repeated_violations", ttl_seconds=3600
        )

    async def test_honeypot_hit_weighs_heavily_and_blocks(self, tracker: IPTracker):
        tracker.strikes.incr.return_value = HONEYPOT_SUSPICION_WEIGHT

        await tracker.record_honeypot_hit("203.0.113.7", "/api/internal/export")

        tracker.strikes.incr.assert_awaited_once_with(
            "203.0.113.7", HONEYPOT_SUSPICION_WEIGHT, ttl_seconds=3600
        )
        tracker.blocks.set.assert_any_await(
            "203.0.113.7", "honeypot", ttl_seconds=3600
        )

    async def test_unblock_clears_strikes_and_block(self, tracker: IPTracker):
        tracker.blocks.delete.return_value = True

        assert await tracker.unblock("203.0.113.7") is True
        tracker.strikes.delete.assert_awaited_once_with("203.0.113.7")
