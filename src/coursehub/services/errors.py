"""Domain errors raised by the CourseHub services.

The API layer maps these to HTTP responses; see ``coursehub.api.errors``.
"""

from __future__ import annotations

from uuid import UUID


class ServiceError(Exception):
    """Base class for domain errors."""


class CourseNotFoundError(ServiceError):
    def __init__(self, course_id: UUID):
        self.course_id = course_id
        super().__init__(f"Course '{course_id}' not found")


class EnrollmentNotFoundError(ServiceError):
    def __init__(self, text: str = "Enrollment not found"):
        super().__init__(text)


class AlreadyEnrolledError(ServiceError):
    def __init__(self, student_email: str, course_id: UUID):
        self.student_email = student_email
        self.course_id = course_id
        super().__init__("Student is already enrolled in this course")


class InvalidEmailError(ServiceError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Invalid email format")


class InvalidCredentialsError(ServiceError):
    def __init__(self) -> None:
        super().__init__("Invalid username or password")
