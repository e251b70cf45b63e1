"""API routers for CourseHub."""

from coursehub.api.routers import auth, courses, enrollments, health, metrics

__all__ = ["auth", "courses", "enrollments", "health", "metrics"]
