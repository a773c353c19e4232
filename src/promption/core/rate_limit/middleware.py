"""Rate limiting middleware for global request limits.

Applies rate limits to all requests based on the session subject
(authenticated) or client IP address (unauthenticated).
"""

from typing import ClassVar

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from promption.config import settings
from promption.core.errors import TooManyRequestsError, app_exception_handler
from promption.core.rate_limit.backend import RateLimitResult, rate_limiter
from promption.core.rate_limit.ip_tracker import ip_tracker
from promption.core.utils.net import get_client_ip


logger = structlog.get_logger()


def get_identifier(request: Request) -> str:
    """Extract rate limit identifier from request.

    Uses the auth subject set by ``SessionContextMiddleware`` when the
    request carries a valid session, otherwise the client IP.

    Returns:
        Identifier string (user:{subject} or ip:{address})
    """
    auth_subject = getattr(request.state, "auth_subject", None)
    if auth_subject:
        return f"user:{auth_subject}"
    return f"ip:{get_client_ip(request)}"


async def check_limit(
    request: Request,
    limit: int,
    window: int,
    endpoint: str | None = None,
) -> tuple[RateLimitResult | None, Response | None]:
    """Count a request against a limit.

    Fails open: when Redis is unavailable the request is allowed and no
    headers are produced.

    Returns:
        The limit result (None if Redis failed) and, when over the
        limit, the 429 response to send instead
    """
    try:
        result = await rate_limiter.is_allowed(
            identifier=get_identifier(request),
            limit=limit,
            window=window,
            endpoint=endpoint,
        )
    except RedisError as e:
        logger.warning("rate_limit_unavailable", path=request.url.path, error=str(e))
        return None, None

    if result.allowed:
        return result, None

    client_ip = get_client_ip(request)
    try:
        await ip_tracker.record_violation(client_ip)
    except RedisError as e:
        logger.warning("ip_strike_unavailable", client_ip=client_ip, error=str(e))

    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        limit=limit,
        window=window,
    )
    response = await app_exception_handler(
        request,
        TooManyRequestsError(details={"limit": limit, "window": window}),
    )
    response.headers.update(result.headers())
    return result, response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that applies global rate limits to all requests.

    Adds standard rate limit headers to all responses.
    """

    EXCLUDED_PATHS: ClassVar[set[str]] = {
        "/health/live",
        "/health/ready",
        "/docs",
        "/redoc",
        "/openapi.json",
    }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and apply rate limiting.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response with rate limit headers
        """
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        result, rejection = await check_limit(
            request,
            limit=settings.rate_limit_requests,
            window=settings.rate_limit_window,
        )
        if rejection is not None:
            return rejection

        response = await call_next(request)

        if result is not None:
            response.headers.update(result.headers())
        return response
