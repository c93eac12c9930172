"""Async database engine and session management.

Provides:
    - get_async_session: FastAPI dependency that yields a session per request.
    - get_session_factory: sessionmaker bound to the engine (scripts, simulation).
    - init_db / close_db: Lifecycle hooks for FastAPI's lifespan.

Usage in FastAPI:
    @router.get("/domains/{domain_id}")
    async def get_domain(session: AsyncSession = Depends(get_async_session)):
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from geodomain.config import get_settings
from geodomain.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = get_logger(__name__)

# Module-level singletons (initialized lazily)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_kwargs(database_url: str) -> dict[str, Any]:
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.db_echo_sql}
    # SQLite (simulation, tests) uses a single-connection pool without sizing knobs
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
    return kwargs


def _get_engine() -> AsyncEngine:
    """Get or create the async engine (lazy singleton)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url, **_engine_kwargs(settings.database_url)
        )
        logger.info(
            "database.engine_created",
            backend=_engine.dialect.name,
            pool_size=settings.db_pool_size,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory (lazy singleton)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=_get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async database session.

    The session is automatically committed on success or rolled back on error.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Initialize the database engine and create tables if they don't exist.

    Called during FastAPI's lifespan startup. In production, use Alembic
    migrations instead of create_all.
    """
    from geodomain.infrastructure.database.orm_models import Base

    engine = _get_engine()
    settings = get_settings()

    if settings.is_development:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("database.tables_created")
    else:
        logger.info("database.skipping_create_all", reason="not in development mode")


async def check_db() -> bool:
    """Run a trivial query; used by the health endpoint."""
    from sqlalchemy import text

    async with _get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


async def close_db() -> None:
    """Dispose of the database engine. Called during FastAPI's lifespan shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("database.engine_disposed")
        _engine = None
        _session_factory = None
