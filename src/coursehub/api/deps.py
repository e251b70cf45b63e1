"""Shared FastAPI dependencies for CourseHub routers.

Provides:
- UUID path parameter parsing with the API's own 400 message
- Service construction per request (session-scoped repositories, shared cache)
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.api.errors import BadRequestError
from coursehub.cache.aside import CacheAside
from coursehub.core.model import Course
from coursehub.persistence.db import get_session
from coursehub.persistence.repositories import (
    CourseRepository,
    EnrollmentRepository,
    UserRepository,
)
from coursehub.security.tokens import TokenService
from coursehub.services.auth import AuthService
from coursehub.services.catalog import CatalogService
from coursehub.services.enrollment import EnrollmentService, StudentService

# =============================================================================
# Path parameters
# =============================================================================


def parse_uuid(raw_id: str, message: str) -> UUID:
    """Parse a UUID path segment.

    Raises:
        BadRequestError: If the value is not a valid UUID
    """
    try:
        return UUID(raw_id)
    except ValueError:
        raise BadRequestError(message)


def course_id_path(
    course_id: Annotated[str, Path(description="Course UUID")],
) -> UUID:
    """FastAPI dependency to parse the course ID from the path."""
    return parse_uuid(course_id, "Invalid course ID format")


def enrollment_id_path(
    enrollment_id: Annotated[str, Path(description="Enrollment UUID")],
) -> UUID:
    """FastAPI dependency to parse the enrollment ID from the path."""
    return parse_uuid(enrollment_id, "Invalid enrollment ID format")


CourseId = Annotated[UUID, Depends(course_id_path)]
EnrollmentId = Annotated[UUID, Depends(enrollment_id_path)]

# =============================================================================
# Shared application state
# =============================================================================


def get_course_cache(request: Request) -> CacheAside[Course]:
    """Course cache built at startup and held on the application."""
    cache: CacheAside[Course] = request.app.state.course_cache
    return cache


def get_token_service(request: Request) -> TokenService:
    tokens: TokenService = request.app.state.token_service
    return tokens


# =============================================================================
# Services
# =============================================================================


async def get_catalog_service(
    session: AsyncSession = Depends(get_session),
    cache: CacheAside[Course] = Depends(get_course_cache),
) -> CatalogService:
    return CatalogService(CourseRepository(session), EnrollmentRepository(session), cache)


async def get_enrollment_service(
    session: AsyncSession = Depends(get_session),
) -> EnrollmentService:
    return EnrollmentService(EnrollmentRepository(session), CourseRepository(session))


async def get_student_service(
    session: AsyncSession = Depends(get_session),
) -> StudentService:
    return StudentService(EnrollmentRepository(session))


async def get_auth_service(
    session: AsyncSession = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(UserRepository(session), tokens)
