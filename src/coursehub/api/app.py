"""FastAPI application factory for CourseHub.

Creates the application with:
- Course, enrollment, student and auth routers under /api/v1
- Lifecycle management for the database and the Redis look-aside cache
- JWT authentication with an admin role check
- Prometheus metrics and request-scoped logging context
- Consistent ``{"error", "message"}`` error bodies
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from coursehub.api.errors import (
    ApiError,
    api_exception_handler,
    generic_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from coursehub.api.middleware import RequestIdMiddleware
from coursehub.api.routers import auth, courses, enrollments, health
from coursehub.api.routers import metrics as metrics_router
from coursehub.cache import create_backend, create_course_cache
from coursehub.config import settings
from coursehub.observability import configure_logging
from coursehub.observability.metrics import get_metrics
from coursehub.persistence.db import close_database, get_database
from coursehub.security.tokens import TokenService
from coursehub.services.errors import ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Initialize Prometheus metrics
    - Initialize the database schema and connection pool
    - Build the cache backend and the course cache

    On shutdown:
    - Close the cache backend
    - Close database connections
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )
    get_metrics()

    logger.info("Starting CourseHub (%s)", settings.env)
    await get_database().create_schema()

    backend = create_backend(settings)
    app.state.cache_backend = backend
    app.state.course_cache = create_course_cache(backend, settings)
    app.state.token_service = TokenService(
        settings.jwt_secret,
        issuer=settings.jwt_issuer,
        expiry=timedelta(hours=settings.jwt_expiry_hours),
    )

    # An unreachable cache is not fatal; reads fall through to the database
    if settings.cache_enabled and not await app.state.course_cache.health_check():
        logger.warning("Redis at %s is unreachable, serving from the database", settings.redis_url)

    logger.info("CourseHub startup complete")

    yield

    logger.info("Shutting down CourseHub")
    await backend.close()
    await close_database()
    logger.info("CourseHub shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CourseHub",
        description="Course catalog and enrollment service",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers
    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(ServiceError, cast(ExceptionHandler, service_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    # Include routers
    app.include_router(health.router)
    if settings.enable_metrics:
        app.include_router(metrics_router.router)

    app.include_router(auth.router)
    app.include_router(courses.router)
    app.include_router(enrollments.router)

    return app
