"""Liveness and readiness endpoints."""

from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from serious_people.db import ping_db, ping_redis

logger = structlog.get_logger(__name__)

router = APIRouter()

SERVICE_NAME = "serious-people-backend"

READINESS_CHECKS: dict[str, Callable[[], Awaitable[None]]] = {
    "database": ping_db,
    "redis": ping_redis,
}


@router.get("/health")
async def health_check(request: Request):
    """Liveness check. Returns 503 once SIGTERM has been received so traffic drains."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(status_code=503, content={"status": "shutting_down", "service": SERVICE_NAME})
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness_check():
    """Readiness check: every backing store must answer a ping."""
    checks: dict[str, bool] = {}
    for name, ping in READINESS_CHECKS.items():
        try:
            await ping()
            checks[name] = True
        except Exception as exc:
            logger.error("readiness_check_failed", check=name, error=str(exc), error_type=type(exc).__name__)
            checks[name] = False

    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
