"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promption import __version__
from promption.api.router import api_router
from promption.config import settings
from promption.core.auth import RequestIdMiddleware, SessionContextMiddleware
from promption.core.cache import close_redis_pool
from promption.core.database import async_engine
from promption.core.errors import register_exception_handlers
from promption.core.jobs import close_arq_pool
from promption.core.logging import RequestLoggingMiddleware, configure_logging
from promption.core.observability import setup_tracing, shutdown_tracing
from promption.core.rate_limit import BotProtectionMiddleware, RateLimitMiddleware


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    The ARQ pool is opened lazily on the first enqueue, so startup does
    not depend on Redis being reachable.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    yield

    logger.info("application_shutdown")

    shutdown_tracing()

    await close_arq_pool()
    logger.info("arq_pool_closed")

    await close_redis_pool()
    logger.info("redis_pool_closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Shared prompt libraries organised into workspaces",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    # Middleware added last runs first. Request order:
    # CORS -> RequestId -> RequestLogging -> SessionContext -> BotProtection
    # -> RateLimit -> handler
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)

    if settings.bot_protection_enabled:
        app.add_middleware(BotProtectionMiddleware)

    app.add_middleware(SessionContextMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(api_router)

    setup_tracing(app, engine=async_engine)

    return app


app = create_app()
