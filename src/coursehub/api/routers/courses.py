"""Course catalog API router.

- GET    /api/v1/courses                              - Paginated/search listing (uncached)
- GET    /api/v1/courses/all                          - All courses (cached snapshot)
- POST   /api/v1/courses                              - Create course
- GET    /api/v1/courses/{id}                         - Get course (cached)
- PUT    /api/v1/courses/{id}                         - Update course
- DELETE /api/v1/courses/{id}                         - Delete course and its enrollments
- GET    /api/v1/courses/{id}/students                - Enrolled student emails
- DELETE /api/v1/courses/{id}/students/{email}        - Remove a student

All routes require an admin token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel

from coursehub.api.deps import CourseId, get_catalog_service
from coursehub.core.model import (
    DEFAULT_PAGE_SIZE,
    Course,
    CourseListResponse,
    CourseQuery,
    CourseRequest,
    Difficulty,
)
from coursehub.security.deps import require_admin
from coursehub.services.catalog import CatalogService

router = APIRouter(
    prefix="/api/v1/courses",
    tags=["courses"],
    dependencies=[Depends(require_admin)],
)

Catalog = Annotated[CatalogService, Depends(get_catalog_service)]


class CourseStudents(BaseModel):
    course_id: str
    students: list[str]
    total: int


@router.get("", response_model=CourseListResponse)
async def list_courses_page(
    catalog: Catalog,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = DEFAULT_PAGE_SIZE,
    search: Annotated[str | None, Query()] = None,
    difficulty: Annotated[Difficulty | None, Query()] = None,
) -> CourseListResponse:
    """List courses with pagination, search and difficulty filter."""
    query = CourseQuery(page=page, limit=limit, search=search, difficulty=difficulty)
    return await catalog.list_courses_page(query)


@router.get("/all", response_model=list[Course])
async def list_all_courses(catalog: Catalog) -> list[Course]:
    """List every course, newest first."""
    return await catalog.list_courses()


@router.post("", status_code=201, response_model=Course)
async def create_course(request: CourseRequest, catalog: Catalog) -> Course:
    return await catalog.create_course(request)


@router.get("/{course_id}", response_model=Course)
async def get_course(course_id: CourseId, catalog: Catalog) -> Course:
    return await catalog.get_course(course_id)


@router.put("/{course_id}", response_model=Course)
async def update_course(course_id: CourseId, request: CourseRequest, catalog: Catalog) -> Course:
    return await catalog.update_course(course_id, request)


@router.delete("/{course_id}", status_code=204)
async def delete_course(course_id: CourseId, catalog: Catalog) -> Response:
    await catalog.delete_course(course_id)
    return Response(status_code=204)


@router.get("/{course_id}/students", response_model=CourseStudents)
async def get_course_students(course_id: CourseId, catalog: Catalog) -> CourseStudents:
    students = await catalog.get_course_students(course_id)
    return CourseStudents(course_id=str(course_id), students=students, total=len(students))


@router.delete("/{course_id}/students/{student_email}", status_code=204)
async def remove_student(course_id: CourseId, student_email: str, catalog: Catalog) -> Response:
    await catalog.remove_student(course_id, student_email)
    return Response(status_code=204)
