"""API test fixtures.

Builds the application without its lifespan: app state is populated with an
in-memory course cache and a token service, and services are overridden to
use mocked repositories.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from coursehub.api.app import create_app
from coursehub.api.deps import (
    get_auth_service,
    get_catalog_service,
    get_enrollment_service,
    get_student_service,
)
from coursehub.cache import CacheAside
from coursehub.core.model import Course, Role
from coursehub.persistence.repositories import (
    CourseRepository,
    EnrollmentRepository,
    UserRepository,
)
from coursehub.security.tokens import TokenService
from coursehub.services.auth import AuthService
from coursehub.services.catalog import CatalogService
from coursehub.services.enrollment import EnrollmentService, StudentService


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("test-secret")


@pytest.fixture
def admin_headers(tokens: TokenService) -> dict[str, str]:
    token = tokens.issue("7b1a3c2e-0d4f-4a6b-9c8d-1e2f3a4b5c6d", "admin", Role.ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(tokens: TokenService) -> dict[str, str]:
    token = tokens.issue("user-1", "bob", Role.USER)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def course_repo() -> AsyncMock:
    return AsyncMock(spec=CourseRepository)


@pytest.fixture
def enrollment_repo() -> AsyncMock:
    return AsyncMock(spec=EnrollmentRepository)


@pytest.fixture
def user_repo() -> AsyncMock:
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def app(
    course_cache: CacheAside[Course],
    tokens: TokenService,
    course_repo: AsyncMock,
    enrollment_repo: AsyncMock,
    user_repo: AsyncMock,
) -> FastAPI:
    app = create_app()
    app.state.course_cache = course_cache
    app.state.token_service = tokens

    app.dependency_overrides[get_catalog_service] = lambda: CatalogService(
        course_repo, enrollment_repo, course_cache
    )
    app.dependency_overrides[get_enrollment_service] = lambda: EnrollmentService(
        enrollment_repo, course_repo
    )
    app.dependency_overrides[get_student_service] = lambda: StudentService(enrollment_repo)
    app.dependency_overrides[get_auth_service] = lambda: AuthService(user_repo, tokens)
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
