"""Health check endpoint.

Verifies connectivity to PostgreSQL and Redis, returns structured status.
Used by Docker healthchecks, load balancers, and monitoring systems.
"""

from fastapi import APIRouter

from geodomain import __version__
from geodomain.infrastructure.database.engine import check_db
from geodomain.infrastructure.redis_client import get_redis
from geodomain.logging_config import get_logger
from geodomain.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application and its dependencies.",
)
async def health_check() -> HealthResponse:
    """Check connectivity to PostgreSQL and Redis."""
    db_status = "unknown"
    redis_status = "unknown"

    # Dependency failures are reported in the body, not raised
    try:
        await check_db()
        db_status = "healthy"
    except Exception as exc:
        db_status = f"unhealthy: {exc}"
        logger.error("health.db_check_failed", error=str(exc))

    try:
        await get_redis().ping()
        redis_status = "healthy"
    except Exception as exc:
        redis_status = f"unhealthy: {exc}"
        logger.error("health.redis_check_failed", error=str(exc))

    overall = "ok" if db_status == "healthy" and redis_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        redis=redis_status,
    )
