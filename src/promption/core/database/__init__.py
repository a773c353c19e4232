"""Database layer - session management, base models, and mixins."""

from promption.core.database.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    WorkspaceScopedMixin,
)
from promption.core.database.session import (
    async_engine,
    async_session_factory,
    build_engine,
    get_db,
)
from promption.core.database.types import UTCDateTime


__all__ = [
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDMixin",
    "WorkspaceScopedMixin",
    "async_engine",
    "async_session_factory",
    "build_engine",
    "get_db",
]
