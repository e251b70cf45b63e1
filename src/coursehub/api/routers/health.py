"""Health check endpoint for CourseHub.

GET /health reports database and cache connectivity. An unreachable cache
only degrades the service; an unreachable database makes it unhealthy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from coursehub.cache.aside import CacheAside
from coursehub.cache.backend import NullBackend
from coursehub.config import settings
from coursehub.persistence.db import get_database

router = APIRouter(tags=["health"])


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


async def cache_status(cache: CacheAside[Any]) -> str:
    if isinstance(cache.backend, NullBackend):
        return "disabled"
    return "connected" if await cache.health_check() else "disconnected"


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    database_ok = await get_database().ping()
    cache = await cache_status(request.app.state.course_cache)

    if not database_ok:
        status = HealthStatus.UNHEALTHY
    elif cache == "disconnected":
        status = HealthStatus.DEGRADED
    else:
        status = HealthStatus.HEALTHY

    return JSONResponse(
        status_code=503 if status == HealthStatus.UNHEALTHY else 200,
        content={
            "status": status.value,
            "service": settings.app_name,
            "database": "connected" if database_ok else "disconnected",
            "cache": cache,
        },
    )
