"""Business logic for CourseHub."""

from coursehub.services.auth import AuthService
from coursehub.services.catalog import CatalogService
from coursehub.services.enrollment import EnrollmentService, StudentService

__all__ = [
    "AuthService",
    "CatalogService",
    "EnrollmentService",
    "StudentService",
]
