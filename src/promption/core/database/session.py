"""Async database session management.

Every store call is bounded: acquiring a pooled connection waits at most
``database_pool_timeout`` seconds and each statement is cancelled by the
server after ``database_statement_timeout_ms``. The resulting errors are
mapped to a retryable 503 by the exception handlers.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from promption.config import settings


def build_engine(
    url: str | None = None,
    pool_size: int | None = None,
    max_overflow: int | None = None,
) -> AsyncEngine:
    """Create an async engine with bounded pool and statement timeouts.

    Args:
        url: Database URL (defaults to the configured PostgreSQL URL)
        pool_size: Connection pool size
        max_overflow: Extra connections allowed beyond the pool size

    Returns:
        Configured AsyncEngine
    """
    return create_async_engine(
        url or settings.async_database_url,
        pool_size=pool_size or settings.database_pool_size,
        max_overflow=max_overflow or settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        echo=settings.database_echo,
        pool_pre_ping=True,
        connect_args={
            "command_timeout": settings.database_command_timeout,
            "server_settings": {
                "statement_timeout": str(settings.database_statement_timeout_ms),
            },
        },
    )


async_engine = build_engine()

async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a request-scoped transaction.

    The transaction commits when the handler returns and rolls back on
    any exception, so each request's writes are all-or-nothing.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
