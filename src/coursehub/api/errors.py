"""Error responses for the CourseHub API.

Every error body has the shape ``{"error": <short title>, "message": <detail>}``.
Domain errors raised by the services are translated here so routers can let
them propagate.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from coursehub.services.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    InvalidCredentialsError,
    InvalidEmailError,
    ServiceError,
)

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    error: str
    message: str


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        headers: dict[str, str] | None = None,
    ):
        self.error = error
        self.message = message
        super().__init__(status_code=status_code, detail=message, headers=headers)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, message=self.message)


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, message: str):
        super().__init__(status_code=400, error="Bad request", message=message)


class UnauthorizedError(ApiError):
    """Missing or invalid credentials (401)."""

    def __init__(self, message: str):
        super().__init__(
            status_code=401,
            error="Unauthorized",
            message=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(ApiError):
    """Authenticated but not allowed (403)."""

    def __init__(self, message: str = "Admin access required"):
        super().__init__(status_code=403, error="Forbidden", message=message)


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, message: str):
        super().__init__(status_code=404, error="Not found", message=message)


class ConflictError(ApiError):
    """Resource already exists (409)."""

    def __init__(self, message: str):
        super().__init__(status_code=409, error="Conflict", message=message)


def api_error_from_service(exc: ServiceError) -> ApiError:
    """Translate a domain error to its HTTP counterpart."""
    if isinstance(exc, CourseNotFoundError):
        return NotFoundError("The requested course does not exist")
    if isinstance(exc, EnrollmentNotFoundError):
        return NotFoundError(str(exc))
    if isinstance(exc, AlreadyEnrolledError):
        return ConflictError(str(exc))
    if isinstance(exc, InvalidEmailError):
        return BadRequestError(str(exc))
    if isinstance(exc, InvalidCredentialsError):
        return UnauthorizedError(str(exc))
    return ApiError(status_code=400, error="Bad request", message=str(exc))


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for API errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers=exc.headers,
    )


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Exception handler for domain errors raised by the services."""
    return await api_exception_handler(request, api_error_from_service(exc))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Exception handler for request body/parameter validation failures."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    text = first.get("msg", "Invalid request")
    message = f"{location}: {text}" if location else text
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Validation failed", message=message).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error", message="An unexpected error occurred"
        ).model_dump(),
    )
