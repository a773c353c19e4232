"""Request network helpers."""

from starlette.requests import Request

from promption.config import settings


def get_client_ip(request: Request) -> str:
    """Return the originating client IP of a request.

    ``X-Forwarded-For`` is honoured only when the direct peer is one of
    the configured trusted proxies; otherwise any client could spoof it.

    Args:
        request: HTTP request

    Returns:
        Client IP address, or ``"unknown"`` without a peer
    """
    peer = request.client.host if request.client else None
    forwarded_for = request.headers.get("X-Forwarded-For")

    if forwarded_for and peer in settings.trusted_proxies:
        return forwarded_for.split(",")[0].strip()

    return peer or "unknown"
