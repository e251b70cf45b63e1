"""Login and admin seeding."""

from __future__ import annotations

import logging
from uuid import UUID

from coursehub.core.model import LoginRequest, LoginResponse, Role, UserProfile
from coursehub.persistence.repositories import UserRepository
from coursehub.security.passwords import hash_password, verify_password
from coursehub.security.tokens import TokenService
from coursehub.services.errors import InvalidCredentialsError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    async def login(self, request: LoginRequest) -> LoginResponse:
        """Check credentials and issue a token.

        Unknown users and wrong passwords fail identically.
        """
        user = await self.users.get_by_username(request.username)
        if user is None or not verify_password(request.password, user.password):
            raise InvalidCredentialsError()

        profile = UserProfile.model_validate(user)
        token = self.tokens.issue(str(profile.id), profile.username, profile.role)
        return LoginResponse(token=token, user=profile)

    async def profile(self, user_id: UUID) -> UserProfile | None:
        user = await self.users.get(user_id)
        return UserProfile.model_validate(user) if user is not None else None

    async def ensure_admin(self, username: str, password: str) -> bool:
        """Create the admin user if it does not exist.

        Returns True if a user was created.
        """
        if await self.users.get_by_username(username) is not None:
            logger.info("Admin user already exists, skipping seed")
            return False

        user = await self.users.create(username, hash_password(password), Role.ADMIN.value)
        await self.users.commit()
        logger.info("Admin user created with ID: %s", user.id)
        return True
