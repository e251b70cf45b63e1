"""Repository pattern for CourseHub persistence.

Repositories flush but never commit; the owning service commits so that
cache invalidation can run strictly after the write is durable.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coursehub.core.model import CourseQuery, CourseRequest
from coursehub.persistence.tables import Base, CourseTable, EnrollmentTable, UserTable

TableT = TypeVar("TableT", bound=Base)


class BaseRepository(Generic[TableT]):
    """Base repository holding the session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


class CourseRepository(BaseRepository[CourseTable]):
    """Repository for course operations."""

    async def create(self, request: CourseRequest) -> CourseTable:
        row = CourseTable(
            title=request.title,
            description=request.description,
            difficulty=request.difficulty.value,
            image_url=request.image_url,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get(self, course_id: UUID) -> CourseTable | None:
        return await self.session.get(CourseTable, course_id)

    async def exists(self, course_id: UUID) -> bool:
        stmt = select(CourseTable.id).where(CourseTable.id == course_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_all(self) -> Sequence[CourseTable]:
        """All courses, newest first."""
        stmt = select(CourseTable).order_by(CourseTable.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_page(self, query: CourseQuery) -> tuple[Sequence[CourseTable], int]:
        """One page of courses matching search/difficulty, plus the total match count."""
        filters = []
        if query.search:
            pattern = f"%{query.search}%"
            filters.append(
                or_(CourseTable.title.ilike(pattern), CourseTable.description.ilike(pattern))
            )
        if query.difficulty is not None:
            filters.append(CourseTable.difficulty == query.difficulty.value)

        count_stmt = select(func.count()).select_from(CourseTable).where(*filters)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(CourseTable)
            .where(*filters)
            .order_by(CourseTable.created_at.desc())
            .limit(query.limit)
            .offset(query.offset)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all(), total

    async def update(self, course_id: UUID, request: CourseRequest) -> CourseTable | None:
        row = await self.get(course_id)
        if row is None:
            return None
        row.title = request.title
        row.description = request.description
        row.difficulty = request.difficulty.value
        row.image_url = request.image_url
        await self.session.flush()
        return row

    async def delete(self, course_id: UUID) -> bool:
        """Delete a course and its enrollments.

        Returns:
            True if deleted, False if not found.
        """
        row = await self.get(course_id)
        if row is None:
            return False
        await self.session.execute(
            delete(EnrollmentTable).where(EnrollmentTable.course_id == course_id)
        )
        await self.session.delete(row)
        await self.session.flush()
        return True


class EnrollmentRepository(BaseRepository[EnrollmentTable]):
    """Repository for enrollment operations."""

    async def create(self, student_email: str, course_id: UUID) -> EnrollmentTable:
        row = EnrollmentTable(student_email=student_email, course_id=course_id)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get(self, enrollment_id: UUID) -> EnrollmentTable | None:
        stmt = (
            select(EnrollmentTable)
            .options(selectinload(EnrollmentTable.course))
            .where(EnrollmentTable.id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_student_and_course(
        self, student_email: str, course_id: UUID
    ) -> EnrollmentTable | None:
        stmt = (
            select(EnrollmentTable)
            .options(selectinload(EnrollmentTable.course))
            .where(
                EnrollmentTable.student_email == student_email,
                EnrollmentTable.course_id == course_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, student_email: str, course_id: UUID) -> bool:
        stmt = select(func.count()).select_from(EnrollmentTable).where(
            EnrollmentTable.student_email == student_email,
            EnrollmentTable.course_id == course_id,
        )
        return (await self.session.execute(stmt)).scalar_one() > 0

    async def list_by_student(self, student_email: str) -> Sequence[EnrollmentTable]:
        """A student's enrollments, newest first, with courses loaded."""
        stmt = (
            select(EnrollmentTable)
            .options(selectinload(EnrollmentTable.course))
            .where(EnrollmentTable.student_email == student_email)
            .order_by(EnrollmentTable.enrolled_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_all(self) -> Sequence[EnrollmentTable]:
        stmt = (
            select(EnrollmentTable)
            .options(selectinload(EnrollmentTable.course))
            .order_by(EnrollmentTable.enrolled_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def student_emails_for_course(self, course_id: UUID) -> list[str]:
        stmt = (
            select(EnrollmentTable.student_email)
            .where(EnrollmentTable.course_id == course_id)
            .order_by(EnrollmentTable.enrolled_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def student_summaries(self) -> list[tuple[str, int, datetime]]:
        """(email, enrollment_count, last_enrolled_at) per student.

        Ordered by enrollment count, then most recent enrollment.
        """
        count = func.count(EnrollmentTable.id).label("enrollment_count")
        last = func.max(EnrollmentTable.enrolled_at).label("last_enrolled_at")
        stmt = (
            select(EnrollmentTable.student_email, count, last)
            .group_by(EnrollmentTable.student_email)
            .order_by(count.desc(), last.desc())
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def delete(self, enrollment_id: UUID) -> bool:
        stmt = delete(EnrollmentTable).where(EnrollmentTable.id == enrollment_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return bool(result.rowcount)


class UserRepository(BaseRepository[UserTable]):
    """Repository for user accounts."""

    async def get(self, user_id: UUID) -> UserTable | None:
        return await self.session.get(UserTable, user_id)

    async def get_by_username(self, username: str) -> UserTable | None:
        stmt = select(UserTable).where(UserTable.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, username: str, password_hash: str, role: str) -> UserTable:
        row = UserTable(username=username, password=password_hash, role=role)
        self.session.add(row)
        await self.session.flush()
        return row
