"""FastAPI dependency injection providers.

These are used with Depends() in route handlers to inject database sessions,
the per-request caller context and idempotency keys.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import Header

from geodomain.domain.context import RequestContext
from geodomain.domain.enums import UserRole
from geodomain.domain.exceptions import UnauthorizedError
from geodomain.infrastructure.database.engine import get_async_session
from geodomain.infrastructure.redis_client import (
    claim_idempotency_key,
    redis_available,
    release_idempotency_key,
)
from geodomain.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# Routes depend on this name; tests override it with an in-memory session.
get_db_session = get_async_session


async def get_request_context(
    x_user_id: str | None = Header(default=None),
    x_user_role: UserRole = Header(default=UserRole.BUYER),
) -> RequestContext:
    """Build the caller context from headers set by the upstream session provider."""
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError()
    structlog.contextvars.bind_contextvars(user_id=x_user_id)
    return RequestContext(user_id=x_user_id.strip(), role=x_user_role)


async def get_idempotency_key(
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> str | None:
    return idempotency_key


@asynccontextmanager
async def idempotent(
    scope: str, key: str | None, owner: str, session: AsyncSession | None = None
) -> AsyncIterator[None]:
    """Guard a side-effecting call with a Redis idempotency key.

    No key means no guard. A reused key raises DuplicateOperationError; a
    failed call releases its key so the client can retry with it. When a
    session is given it is committed inside the guard, so a failed commit
    releases the key too.
    """
    guarded = key is not None and redis_available()
    if key is not None and not guarded:
        logger.warning("idempotency.redis_unavailable", scope=scope)

    if guarded:
        await claim_idempotency_key(scope, key, owner)
    try:
        yield
        if session is not None:
            await session.commit()
    except Exception:
        if guarded:
            await release_idempotency_key(scope, key)
        raise
