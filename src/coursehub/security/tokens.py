"""JWT issuance and validation for CourseHub.

Tokens are HS256-signed with the configured secret and carry the user's
subject (ID), username and role. ``authenticate`` is the only capability the
rest of the service relies on: token in, ``Principal`` out, or
``InvalidTokenError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from coursehub.core.model import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller extracted from a token."""

    subject: str
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class InvalidTokenError(Exception):
    """Raised when token validation fails."""

    pass


class TokenService:
    """Issues and validates signed access tokens."""

    def __init__(self, secret: str, issuer: str = "coursehub", expiry: timedelta = timedelta(hours=24)):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self.secret = secret
        self.issuer = issuer
        self.expiry = expiry

    def issue(self, subject: str, username: str, role: Role) -> str:
        now = datetime.now(UTC)
        claims: dict[str, Any] = {
            "sub": subject,
            "username": username,
            "role": role.value,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + self.expiry).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=ALGORITHM)

    def authenticate(self, token: str) -> Principal:
        """Validate a token and return its principal.

        Raises:
            InvalidTokenError: If the token is malformed, expired or forged
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={"verify_exp": True},
            )
        except ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError("Token has no subject")
        try:
            role = Role(payload.get("role", Role.USER.value))
        except ValueError as e:
            raise InvalidTokenError("Token has an unknown role") from e

        return Principal(subject=subject, username=payload.get("username", ""), role=role)
