"""Request context middleware.

This module provides middleware for:
- Request tracing with unique IDs
- Binding the session subject to the logging context
"""

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from promption.core.auth.backend import decode_token


if TYPE_CHECKING:
    from starlette.types import ASGIApp


logger = structlog.get_logger()


class SessionContextMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the session subject to downstream layers.

    Verifies the bearer token (if any) without touching the database and
    stores the subject on ``request.state`` so rate limiting and logging
    can key on it. Authentication itself is enforced by the route
    dependencies.

    Attributes:
        exclude_paths: Paths that never carry a session
    """

    def __init__(
        self,
        app: "ASGIApp",
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or [
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
        ]

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Decode the bearer token and bind its subject to the context."""
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            claims = decode_token(auth_header.split(" ", 1)[1])
            if claims:
                request.state.auth_subject = claims.subject
                structlog.contextvars.bind_contextvars(auth_subject=claims.subject)

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Attach a request ID and echo it back in the response."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "auth_subject")

        response.headers["X-Request-ID"] = request_id
        return response
