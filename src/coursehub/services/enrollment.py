"""Enrollment and student services."""

from __future__ import annotations

import logging
from uuid import UUID

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError

from coursehub.core.model import (
    AllEnrollments,
    AllStudents,
    Enrollment,
    EnrollmentRequest,
    StudentEnrollments,
    StudentSummary,
)
from coursehub.persistence.repositories import CourseRepository, EnrollmentRepository
from coursehub.services.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    InvalidEmailError,
)

logger = logging.getLogger(__name__)

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


def validate_email(email: str) -> str:
    """Return the normalized email, or raise InvalidEmailError."""
    try:
        return _email_adapter.validate_python(email)
    except ValidationError as e:
        raise InvalidEmailError(email) from e


class EnrollmentService:
    """Enroll, list and unenroll students."""

    def __init__(self, enrollments: EnrollmentRepository, courses: CourseRepository):
        self.enrollments = enrollments
        self.courses = courses

    async def enroll(self, request: EnrollmentRequest) -> Enrollment:
        email = validate_email(request.student_email)
        if not await self.courses.exists(request.course_id):
            raise CourseNotFoundError(request.course_id)
        if await self.enrollments.exists(email, request.course_id):
            raise AlreadyEnrolledError(email, request.course_id)

        try:
            await self.enrollments.create(email, request.course_id)
            await self.enrollments.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent enroll, or the course was deleted meanwhile
            await self.enrollments.rollback()
            if not await self.courses.exists(request.course_id):
                raise CourseNotFoundError(request.course_id) from e
            raise AlreadyEnrolledError(email, request.course_id) from e

        row = await self.enrollments.get_by_student_and_course(email, request.course_id)
        if row is None:
            raise EnrollmentNotFoundError()
        logger.info("Enrolled %s in course %s", email, request.course_id)
        return Enrollment.model_validate(row)

    async def student_enrollments(self, student_email: str) -> StudentEnrollments:
        email = validate_email(student_email)
        rows = await self.enrollments.list_by_student(email)
        enrollments = [Enrollment.model_validate(row) for row in rows]
        return StudentEnrollments(
            student_email=email, enrollments=enrollments, total=len(enrollments)
        )

    async def unenroll(self, student_email: str, course_id: UUID) -> None:
        email = validate_email(student_email)
        row = await self.enrollments.get_by_student_and_course(email, course_id)
        if row is None:
            raise EnrollmentNotFoundError()
        await self.enrollments.delete(row.id)
        await self.enrollments.commit()


class StudentService:
    """Admin views over all students and enrollments."""

    def __init__(self, enrollments: EnrollmentRepository):
        self.enrollments = enrollments

    async def all_students(self) -> AllStudents:
        summaries = [
            StudentSummary(email=email, enrollment_count=count, last_enrolled_at=last)
            for email, count, last in await self.enrollments.student_summaries()
        ]
        return AllStudents(students=summaries, total=len(summaries))

    async def all_enrollments(self) -> AllEnrollments:
        rows = await self.enrollments.list_all()
        enrollments = [Enrollment.model_validate(row) for row in rows]
        return AllEnrollments(enrollments=enrollments, total=len(enrollments))

    async def delete_enrollment(self, enrollment_id: UUID) -> None:
        if not await self.enrollments.delete(enrollment_id):
            raise EnrollmentNotFoundError()
        await self.enrollments.commit()
