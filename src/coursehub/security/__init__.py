"""Authentication for CourseHub: password hashing and signed access tokens."""

from coursehub.security.passwords import hash_password, verify_password
from coursehub.security.tokens import InvalidTokenError, Principal, TokenService

__all__ = [
    "hash_password",
    "verify_password",
    "InvalidTokenError",
    "Principal",
    "TokenService",
]
