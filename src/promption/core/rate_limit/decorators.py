"""Rate limiting decorator for per-route configuration.

Allows setting stricter rate limits on individual endpoints on top of
the global middleware limit.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from fastapi import Request
from starlette.responses import Response

from promption.config import settings
from promption.core.rate_limit.middleware import check_limit


P = ParamSpec("P")
T = TypeVar("T")


def rate_limit(
    requests: int | None = None,
    window: int | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T | Response]]]:
    """Decorator to apply custom rate limits to a route.

    The route must accept a ``request: Request`` parameter. Limits are
    read from settings at call time when not given.

    Args:
        requests: Maximum requests allowed in window
        window: Time window in seconds

    Returns:
        Decorated function with rate limiting

    Example:
        @router.post("/workspaces/{slug}/invitations")
        @rate_limit(requests=10, window=600)
        async def invite(request: Request, ...):
            ...
    """

    def decorator(
        func: Callable[P, Awaitable[T]],
    ) -> Callable[P, Awaitable[T | Response]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T | Response:
            request = kwargs.get("request")
            if not isinstance(request, Request) or not settings.rate_limit_enabled:
                return await func(*args, **kwargs)

            _, rejection = await check_limit(
                request,
                limit=requests or settings.rate_limit_requests,
                window=window or settings.rate_limit_window,
                endpoint=request.url.path,
            )
            if rejection is not None:
                return rejection

            return await func(*args, **kwargs)

        return wrapper

    return decorator
