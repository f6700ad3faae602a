"""
Health Check Endpoints

Liveness and readiness checks for the orchestrator.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Response
from pydantic import BaseModel
from redis.exceptions import RedisError

from src.config import get_settings
from src.database.connection import check_database_health
from src.serving.cache import get_redis, is_cache_available

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


async def check_cache_health() -> Dict[str, Any]:
    if not is_cache_available():
        return {"status": "disabled"}
    try:
        await get_redis().ping()
    except RedisError as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy"}


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Aggregate health of the API and its backing services.

    The cache is optional: a disabled or failing cache only degrades the status.
    """
    settings = get_settings()
    checks = {
        "database": await check_database_health(),
        "cache": await check_cache_health(),
    }

    overall_status = "healthy"
    if checks["database"].get("status") != "healthy":
        overall_status = "unhealthy"
    elif checks["cache"].get("status") == "unhealthy":
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Ready once the database answers."""
    db_health = await check_database_health()
    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
