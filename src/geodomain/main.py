"""FastAPI application entry point for the GeoDomain marketplace.

Lifecycle:
    1. Startup: Initialize logging, database, Redis, create tables (dev mode).
    2. Running: Serve the REST API under /api/v1/*.
    3. Shutdown: Close database and Redis connections.

Run with:
    uvicorn geodomain.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from geodomain import __version__
from geodomain.config import get_settings
from geodomain.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info("app.starting", env=settings.app_env, debug=settings.app_debug)

    from geodomain.infrastructure.database.engine import close_db, init_db

    await init_db()

    from geodomain.infrastructure.redis_client import close_redis, init_redis

    # Redis only backs idempotency keys; the API runs without it
    try:
        await init_redis()
    except Exception as exc:
        logger.warning("app.redis_unavailable", error=str(exc))

    logger.info("app.started", host=settings.app_host, port=settings.app_port)

    yield

    logger.info("app.shutting_down")
    await close_db()
    await close_redis()
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory - creates and configures the FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="GeoDomain Marketplace",
        description=(
            "Moderated marketplace for geographically scoped domain names: "
            "verified listings, reviewed inquiries, managed deals and wholesale."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    from geodomain.api.middleware import setup_middleware

    setup_middleware(app)

    from geodomain.api.routes import (
        admin,
        deals,
        domains,
        health,
        inquiries,
        messages,
        notifications,
        payments,
        verification,
        wholesale,
    )

    for module in (
        health,
        domains,
        verification,
        inquiries,
        messages,
        deals,
        payments,
        wholesale,
        admin,
        notifications,
    ):
        app.include_router(module.router)

    return app


# The app instance used by Uvicorn
app = create_app()
