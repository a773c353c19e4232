"""ARQ worker configuration.

Defines the registered jobs, cron schedules and startup/shutdown hooks.
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from promption.core.database.session import build_engine
from promption.core.email import EmailDispatcher
from promption.core.jobs.registry import get_redis_settings
from promption.core.jobs.tasks import expire_stale_invitations, send_email
from promption.core.logging import configure_logging


async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources shared by all jobs.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    configure_logging()
    log = structlog.get_logger()
    log.info("worker_startup")

    engine = build_engine(pool_size=5, max_overflow=10)
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    ctx["email_dispatcher"] = EmailDispatcher()

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Release worker resources."""
    log = structlog.get_logger()
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")

    log.info("worker_shutdown_complete")


class WorkerSettings:
    """ARQ worker settings.

    Run the worker with:
        arq promption.core.jobs.worker.WorkerSettings
    """

    functions: ClassVar[list[Any]] = [
        send_email,
        expire_stale_invitations,
    ]

    cron_jobs: ClassVar[list[Any]] = [
        # Sweep stale invitations at the top of every hour
        cron(expire_stale_invitations, minute=0),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 300
    keep_result = 3600
    retry_jobs = True
    max_tries = 3
