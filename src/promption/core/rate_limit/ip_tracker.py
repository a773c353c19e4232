"""Redis-backed IP block list.

Honeypot hits block an address outright. Rate-limit violations add a
strike; reaching the threshold blocks the address as well. Blocks and
strikes both expire on their own.
"""

import structlog

from promption.config import settings
from promption.core.cache.redis import RedisCache
from promption.core.constants import HONEYPOT_SUSPICION_WEIGHT


logger = structlog.get_logger()


class IPTracker:
    """Tracks suspicious client addresses."""

    def __init__(
        self,
        block_seconds: int | None = None,
        threshold: int | None = None,
    ) -> None:
        self.blocks = RedisCache(prefix="ip_block:")
        self.strikes = RedisCache(prefix="ip_strikes:")
        self.block_seconds = block_seconds or settings.ip_block_seconds
        self.threshold = threshold or settings.suspicious_ip_threshold

    async def is_blocked(self, ip: str) -> bool:
        return await self.blocks.exists(ip)

    async def block(self, ip: str, reason: str) -> None:
        """Block an address for the configured period."""
        await self.blocks.set(ip, reason, ttl_seconds=self.block_seconds)
        logger.warning("ip_blocked", client_ip=ip, reason=reason)

    async def record_violation(self, ip: str, weight: int = 1) -> bool:
        """Add strikes against an address, blocking it at the threshold.

        Args:
            ip: Client address
            weight: Number of strikes to add

        Returns:
            True if the address is now blocked
        """
        strikes = await self.strikes.incr(ip, weight, ttl_seconds=self.block_seconds)
        if strikes >= self.threshold:
            await self.block(ip, reason="repeated_violations")
            return True
        return False

    async def record_honeypot_hit(self, ip: str, path: str) -> None:
        """Record a honeypot hit and block the address."""
        logger.warning("honeypot_triggered", client_ip=ip, path=path)
        await self.record_violation(ip, weight=HONEYPOT_SUSPICION_WEIGHT)
        await self.block(ip, reason="honeypot")

    async def unblock(self, ip: str) -> bool:
        await self.strikes.delete(ip)
        return await self.blocks.delete(ip)


# Global tracker instance
ip_tracker = IPTracker()
