"""Structured logging setup and request logging."""

from promption.core.logging.config import configure_logging
from promption.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
]
