"""Authentication API router.

- POST /api/v1/auth/login    - Exchange username/password for a token (public)
- GET  /api/v1/auth/profile  - Current admin's profile
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from coursehub.api.deps import get_auth_service
from coursehub.api.errors import NotFoundError, UnauthorizedError
from coursehub.core.model import LoginRequest, LoginResponse, UserProfile
from coursehub.security.deps import require_admin
from coursehub.security.tokens import Principal
from coursehub.services.auth import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

Auth = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, service: Auth) -> LoginResponse:
    return await service.login(request)


@router.get("/profile", response_model=UserProfile)
async def profile(
    principal: Annotated[Principal, Depends(require_admin)],
    service: Auth,
) -> UserProfile:
    try:
        user_id = UUID(principal.subject)
    except ValueError:
        raise UnauthorizedError("JWT token is invalid or expired")
    user = await service.profile(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
