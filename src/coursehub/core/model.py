"""Pydantic models for courses, enrollments and users.

``Course`` is the value shape stored in the cache, so it must round-trip
through JSON without loss (UUIDs, timezone-aware datetimes, null image URLs).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Difficulty(str, Enum):
    """Course difficulty level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


# -----------------------------------------------------------------------------
# Courses
# -----------------------------------------------------------------------------


class CourseRequest(BaseModel):
    """Payload for creating or updating a course."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    difficulty: Difficulty
    image_url: str | None = Field(default=None, max_length=500, pattern=r"^https?://\S+$")


class Course(BaseModel):
    """A course as returned by the API and stored in the cache."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    difficulty: Difficulty
    image_url: str | None = None
    created_at: datetime


class CourseQuery(BaseModel):
    """Paging, search and filter parameters for the course listing."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: str | None = None
    difficulty: Difficulty | None = None

    def normalized(self) -> CourseQuery:
        """Return a copy with page and limit clamped to valid values."""
        page = self.page if self.page > 0 else 1
        limit = self.limit if self.limit > 0 else DEFAULT_PAGE_SIZE
        limit = min(limit, MAX_PAGE_SIZE)
        search = self.search.strip() if self.search else None
        return self.model_copy(update={"page": page, "limit": limit, "search": search or None})

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> PaginationMeta:
        total_pages = (total_count + limit - 1) // limit
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            has_next=page < total_pages,
            has_prev=page > 1,
            limit=limit,
        )


class CourseListResponse(BaseModel):
    data: list[Course]
    pagination: PaginationMeta


# -----------------------------------------------------------------------------
# Enrollments
# -----------------------------------------------------------------------------


class EnrollmentRequest(BaseModel):
    student_email: EmailStr
    course_id: UUID


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_email: str
    course_id: UUID
    enrolled_at: datetime
    course: Course | None = None


class StudentEnrollments(BaseModel):
    student_email: str
    enrollments: list[Enrollment]
    total: int


class StudentSummary(BaseModel):
    email: str
    enrollment_count: int
    last_enrolled_at: datetime


class AllStudents(BaseModel):
    students: list[StudentSummary]
    total: int


class AllEnrollments(BaseModel):
    enrollments: list[Enrollment]
    total: int


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: Role
    created_at: datetime


class LoginResponse(BaseModel):
    token: str
    user: UserProfile
