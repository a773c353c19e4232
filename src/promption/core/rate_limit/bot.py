"""Bot mitigation: user-agent screening and the IP block gate."""

from typing import TYPE_CHECKING, ClassVar

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from promption.core.errors import ForbiddenError, app_exception_handler
from promption.core.rate_limit.ip_tracker import ip_tracker
from promption.core.utils.net import get_client_ip


if TYPE_CHECKING:
    from starlette.types import ASGIApp


logger = structlog.get_logger()

BOT_USER_AGENT_PATTERNS = (
    "bot",
    "crawler",
    "spider",
    "scraper",
    "curl",
    "wget",
    "python-requests",
    "python-urllib",
    "scrapy",
    "postman",
    "insomnia",
    "httpie",
)


def detect_bot(user_agent: str | None) -> bool:
    """Whether a user agent looks like an automated client.

    >>> detect_bot("Mozilla/5.0 (compatible; Googlebot/2.1)")
    True
    >>> detect_bot("Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)")
    False
    """
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(pattern in ua for pattern in BOT_USER_AGENT_PATTERNS)


class BotProtectionMiddleware(BaseHTTPMiddleware):
    """Reject blocked addresses everywhere and bot user agents on the API.

    Blocked IPs get a 403 before any handler runs. If Redis cannot be
    reached the block list is skipped and the request proceeds.
    """

    EXCLUDED_PATHS: ClassVar[set[str]] = {
        "/health/live",
        "/health/ready",
    }

    def __init__(self, app: "ASGIApp", api_prefix: str = "/api/v1") -> None:
        super().__init__(app)
        self.api_prefix = api_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = get_client_ip(request)

        try:
            blocked = await ip_tracker.is_blocked(client_ip)
        except RedisError as e:
            logger.warning("ip_block_check_unavailable", error=str(e))
            blocked = False

        if blocked:
            return await app_exception_handler(
                request,
                ForbiddenError("Access denied", error_code="ip_blocked"),
            )

        if request.url.path.startswith(self.api_prefix) and detect_bot(
            request.headers.get("User-Agent")
        ):
            logger.warning(
                "bot_rejected",
                client_ip=client_ip,
                user_agent=request.headers.get("User-Agent"),
            )
            return await app_exception_handler(
                request,
                ForbiddenError("Automated clients are not allowed", error_code="bot_detected"),
            )

        return await call_next(request)
