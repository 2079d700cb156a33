"""
Health Check Endpoints
"""

import logging
from typing import Any

import redis.asyncio as redis
from fastapi import APIRouter, Request
from redis.exceptions import RedisError

from bigha.core import check_database_connection
from bigha.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


async def check_redis_connection() -> bool | None:
    """
    Ping the rate-limit store.

    Returns:
        None when Redis is not configured, else whether PING succeeded
    """
    if settings.redis_url is None:
        return None
    client = redis.from_url(str(settings.redis_url))
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return False
    finally:
        await client.aclose()


@router.get("")
async def health_check() -> dict[str, str]:
    """Liveness: the process is up and serving."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness: the database answers a trivial query and, when configured,
    Redis answers PING.
    """
    sessionmaker = getattr(request.app.state, "sessionmaker", None)
    db_healthy = await check_database_connection(sessionmaker)
    redis_healthy = await check_redis_connection()

    checks = {"database": "ok" if db_healthy else "ko"}
    if redis_healthy is not None:
        checks["redis"] = "ok" if redis_healthy else "ko"

    ready = db_healthy and redis_healthy is not False
    return {
        "status": "ready" if ready else "degraded",
        "app": settings.app_name,
        "version": settings.version,
        "checks": checks,
    }
