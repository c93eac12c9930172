"""Redis client for idempotency keys.

Usage:
    from geodomain.infrastructure.redis_client import get_redis, close_redis

    redis = get_redis()
    await redis.set("key", "value", ex=3600)
"""

from __future__ import annotations

import redis.asyncio as aioredis

from geodomain.config import get_settings
from geodomain.domain.exceptions import DuplicateOperationError
from geodomain.logging_config import get_logger

logger = get_logger(__name__)

_redis_client: aioredis.Redis | None = None


async def init_redis() -> aioredis.Redis:
    """Initialize and return the Redis client. Called during app startup."""
    global _redis_client
    settings = get_settings()
    client = aioredis.from_url(
        settings.redis_url,
        decode_responses=True,
    )
    # Published only after a successful ping
    await client.ping()
    _redis_client = client
    logger.info("redis.connected", url=settings.redis_url)
    return _redis_client


def get_redis() -> aioredis.Redis:
    """Return the Redis client singleton. Must call init_redis() first."""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def redis_available() -> bool:
    return _redis_client is not None


async def close_redis() -> None:
    """Close the Redis connection. Called during app shutdown."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        logger.info("redis.disconnected")
        _redis_client = None


# --- Idempotency Helpers ---


def _idempotency_key(scope: str, key: str) -> str:
    return f"idempotency:{scope}:{key}"


async def claim_idempotency_key(scope: str, key: str, owner: str) -> None:
    """Atomically claim a key for an operation, or raise DuplicateOperationError.

    Uses SET NX so two concurrent requests with the same key cannot both
    proceed. The key expires after redis_idempotency_ttl_seconds.
    """
    settings = get_settings()
    redis = get_redis()
    claimed = await redis.set(
        _idempotency_key(scope, key),
        owner,
        ex=settings.redis_idempotency_ttl_seconds,
        nx=True,
    )
    if not claimed:
        logger.warning("idempotency.duplicate", scope=scope, key=key)
        raise DuplicateOperationError(key)


async def release_idempotency_key(scope: str, key: str) -> None:
    """Drop a claimed key so a failed operation can be retried with it."""
    await get_redis().delete(_idempotency_key(scope, key))
