"""Course catalog service.

Single-course reads and the "all courses" listing go through the cache-aside
layer; every write commits to the database first and then invalidates the
affected keys. The paginated/search listing always hits the database.
"""

from __future__ import annotations

import logging
from uuid import UUID

from coursehub.cache.aside import CacheAside
from coursehub.core.model import (
    Course,
    CourseListResponse,
    CourseQuery,
    CourseRequest,
    PaginationMeta,
)
from coursehub.persistence.repositories import CourseRepository, EnrollmentRepository
from coursehub.services.enrollment import validate_email
from coursehub.services.errors import CourseNotFoundError, EnrollmentNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Business logic for course CRUD."""

    def __init__(
        self,
        courses: CourseRepository,
        enrollments: EnrollmentRepository,
        cache: CacheAside[Course],
    ):
        self.courses = courses
        self.enrollments = enrollments
        self.cache = cache

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_course(self, course_id: UUID) -> Course:
        cached = await self.cache.get_entity(course_id)
        if cached is not None:
            return cached

        row = await self.courses.get(course_id)
        if row is None:
            raise CourseNotFoundError(course_id)

        course = Course.model_validate(row)
        await self.cache.put_entity(course_id, course)
        return course

    async def list_courses(self) -> list[Course]:
        """All courses, newest first."""
        cached = await self.cache.get_list()
        if cached is not None:
            return cached

        rows = await self.courses.list_all()
        courses = [Course.model_validate(row) for row in rows]
        await self.cache.put_list(None, courses)
        return courses

    async def list_courses_page(self, query: CourseQuery) -> CourseListResponse:
        query = query.normalized()
        rows, total = await self.courses.list_page(query)
        return CourseListResponse(
            data=[Course.model_validate(row) for row in rows],
            pagination=PaginationMeta.build(query.page, query.limit, total),
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_course(self, request: CourseRequest) -> Course:
        row = await self.courses.create(request)
        course = Course.model_validate(row)
        await self.courses.commit()

        await self.cache.invalidate_all_lists()
        logger.info("Created course %s", course.id)
        return course

    async def update_course(self, course_id: UUID, request: CourseRequest) -> Course:
        row = await self.courses.update(course_id, request)
        if row is None:
            raise CourseNotFoundError(course_id)
        course = Course.model_validate(row)
        await self.courses.commit()

        await self.cache.invalidate_entity(course_id)
        await self.cache.invalidate_all_lists()
        logger.info("Updated course %s", course_id)
        return course

    async def delete_course(self, course_id: UUID) -> None:
        deleted = await self.courses.delete(course_id)
        if not deleted:
            raise CourseNotFoundError(course_id)
        await self.courses.commit()

        await self.cache.invalidate_entity(course_id)
        await self.cache.invalidate_all_lists()
        logger.info("Deleted course %s", course_id)

    # -------------------------------------------------------------------------
    # Course roster
    # -------------------------------------------------------------------------

    async def get_course_students(self, course_id: UUID) -> list[str]:
        if not await self.courses.exists(course_id):
            raise CourseNotFoundError(course_id)
        return await self.enrollments.student_emails_for_course(course_id)

    async def remove_student(self, course_id: UUID, student_email: str) -> None:
        email = validate_email(student_email)
        if not await self.courses.exists(course_id):
            raise CourseNotFoundError(course_id)

        enrollment = await self.enrollments.get_by_student_and_course(email, course_id)
        if enrollment is None:
            raise EnrollmentNotFoundError("Student not enrolled in this course")

        await self.enrollments.delete(enrollment.id)
        await self.enrollments.commit()
