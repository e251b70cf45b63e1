"""Enrollment and student API routers.

- POST   /api/v1/enrollments                                  - Enroll a student
- GET    /api/v1/enrollments                                  - All enrollments
- DELETE /api/v1/enrollments/{id}                             - Delete an enrollment
- GET    /api/v1/students                                     - Students with enrollment counts
- GET    /api/v1/students/{email}/enrollments                 - A student's enrollments
- DELETE /api/v1/students/{email}/enrollments/{course_id}     - Unenroll
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from coursehub.api.deps import (
    CourseId,
    EnrollmentId,
    get_enrollment_service,
    get_student_service,
)
from coursehub.core.model import (
    AllEnrollments,
    AllStudents,
    Enrollment,
    EnrollmentRequest,
    StudentEnrollments,
)
from coursehub.security.deps import require_admin
from coursehub.services.enrollment import EnrollmentService, StudentService

router = APIRouter(prefix="/api/v1", tags=["enrollments"], dependencies=[Depends(require_admin)])

Enrollments = Annotated[EnrollmentService, Depends(get_enrollment_service)]
Students = Annotated[StudentService, Depends(get_student_service)]


@router.post("/enrollments", status_code=201, response_model=Enrollment)
async def enroll_student(request: EnrollmentRequest, service: Enrollments) -> Enrollment:
    return await service.enroll(request)


@router.get("/enrollments", response_model=AllEnrollments)
async def list_enrollments(service: Students) -> AllEnrollments:
    return await service.all_enrollments()


@router.delete("/enrollments/{enrollment_id}", status_code=204)
async def delete_enrollment(enrollment_id: EnrollmentId, service: Students) -> Response:
    await service.delete_enrollment(enrollment_id)
    return Response(status_code=204)


@router.get("/students", response_model=AllStudents)
async def list_students(service: Students) -> AllStudents:
    return await service.all_students()


@router.get("/students/{email}/enrollments", response_model=StudentEnrollments)
async def get_student_enrollments(email: str, service: Enrollments) -> StudentEnrollments:
    return await service.student_enrollments(email)


@router.delete("/students/{email}/enrollments/{course_id}", status_code=204)
async def unenroll_student(email: str, course_id: CourseId, service: Enrollments) -> Response:
    await service.unenroll(email, course_id)
    return Response(status_code=204)
