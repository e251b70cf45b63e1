"""FastAPI security dependencies for CourseHub.

Provides injectable dependencies for authentication and authorization:
- get_principal: Extract and validate the caller from the Bearer token
- require_admin: Require the admin role

Usage:
    @router.get("/courses", dependencies=[Depends(require_admin)])
    async def list_courses(...):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from coursehub.api.deps import get_token_service
from coursehub.api.errors import ForbiddenError, UnauthorizedError
from coursehub.security.tokens import InvalidTokenError, Principal, TokenService


async def get_principal(
    authorization: Annotated[str | None, Header()] = None,
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Extract and validate the caller from the Authorization header.

    Raises UnauthorizedError if the header is missing or the token is invalid.
    """
    if authorization is None:
        raise UnauthorizedError("Authorization header is required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError("Invalid token format")

    try:
        return tokens.authenticate(token.strip())
    except InvalidTokenError:
        raise UnauthorizedError("JWT token is invalid or expired")


async def require_admin(
    principal: Annotated[Principal, Depends(get_principal)],
) -> Principal:
    """Require an authenticated admin."""
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal
