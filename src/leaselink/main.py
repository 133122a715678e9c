"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leaselink import __version__
from leaselink.api import get_api_router
from leaselink.config import settings
from leaselink.core.auth import RequestIdMiddleware, SubjectContextMiddleware
from leaselink.core.cache import close_redis_pool
from leaselink.core.database import async_engine
from leaselink.core.errors import register_exception_handlers
from leaselink.core.logging import RequestLoggingMiddleware, configure_logging
from leaselink.core.observability import setup_tracing, shutdown_tracing


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        rate_limit_backend=settings.rate_limit_backend,
    )

    yield

    logger.info("application_shutdown")

    shutdown_tracing()

    await close_redis_pool()
    logger.info("redis_pool_closed")

    await async_engine.dispose()
    logger.info("database_engine_disposed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Landlords, tenants and the properties that link them",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:8081"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=[
            "X-Request-ID",
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )

    # Last added runs first: request ID, then subject binding, then logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SubjectContextMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(get_api_router())

    setup_tracing(app)

    return app


app = create_app()
