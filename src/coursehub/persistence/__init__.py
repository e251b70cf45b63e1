"""Persistence layer for CourseHub.

This module provides:
- Async PostgreSQL engine and session factory
- SQLAlchemy ORM models for courses, enrollments and users
- Repositories that flush but leave commits to the services
"""

from coursehub.persistence.db import Database, close_database, get_database, get_session
from coursehub.persistence.repositories import (
    CourseRepository,
    EnrollmentRepository,
    UserRepository,
)
from coursehub.persistence.tables import CourseTable, EnrollmentTable, UserTable

__all__ = [
    # DB
    "Database",
    "close_database",
    "get_database",
    "get_session",
    # Tables
    "CourseTable",
    "EnrollmentTable",
    "UserTable",
    # Repositories
    "CourseRepository",
    "EnrollmentRepository",
    "UserRepository",
]
