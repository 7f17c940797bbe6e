"""Health, liveness and readiness endpoints."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from inventory_api.core.config import get_settings
from inventory_api.db import session as db_session
from inventory_api.utils.redis_client import get_redis

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

STARTED_AT = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _database_state() -> str:
    try:
        with db_session.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return "disconnected"


@router.get("", summary="Health check")
async def health() -> dict[str, Any]:
    """Service status with uptime and database connection state."""
    return {
        "status": "ok",
        "timestamp": _now(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "database": _database_state(),
        "version": get_settings().app_version,
    }


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates the API process is running."""
    return {"status": "alive", "timestamp": _now()}


@router.get("/ready", summary="Readiness probe")
async def ready() -> dict[str, Any]:
    """Check database and Redis; 503 when the database is unreachable.

    Redis only backs throttling, which fails open, so a Redis outage is
    reported but does not fail readiness.
    """
    checks: dict[str, Any] = {"status": "ready", "timestamp": _now(), "checks": {}}

    database = _database_state()
    checks["checks"]["database"] = {
        "status": "healthy" if database == "connected" else "unhealthy",
    }

    try:
        get_redis().ping()
        checks["checks"]["redis"] = {"status": "healthy"}
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        checks["checks"]["redis"] = {"status": "unhealthy", "message": str(e)}

    if database != "connected":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not connected",
        )

    return checks
