"""Rate limiting and bot mitigation backed by Redis.

Provides per-user and per-IP sliding window limits, an IP block list
fed by the honeypot and repeated violations, and bot user-agent
screening.
"""

from promption.core.rate_limit.backend import RateLimitResult, SlidingWindowRateLimiter
from promption.core.rate_limit.bot import BotProtectionMiddleware, detect_bot
from promption.core.rate_limit.decorators import rate_limit
from promption.core.rate_limit.honeypot import HONEYPOT_PATH, honeypot_router
from promption.core.rate_limit.ip_tracker import IPTracker, ip_tracker
from promption.core.rate_limit.middleware import RateLimitMiddleware


__all__ = [
    "HONEYPOT_PATH",
    "BotProtectionMiddleware",
    "IPTracker",
    "RateLimitMiddleware",
    "RateLimitResult",
    "SlidingWindowRateLimiter",
    "detect_bot",
    "honeypot_router",
    "ip_tracker",
    "rate_limit",
]
