"""HTTP-level fixtures: the ASGI app wired to the in-memory test database."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest_asyncio

from geodomain.api.deps import get_db_session
from geodomain.main import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app()

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    # ASGITransport does not run the lifespan, so Postgres and Redis are never touched
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
