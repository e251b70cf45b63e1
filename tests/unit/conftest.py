"""Shared fixtures for unit tests.

Provides in-memory cache backends:
- InMemoryBackend: honours TTLs against an injectable clock
- FailingBackend: raises on every call, like an unreachable Redis
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from coursehub.cache import CacheAside, CacheBackendError, ModelCodec
from coursehub.core.model import Course, Difficulty


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryBackend:
    """Dict-backed CacheBackend with per-key expiry."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock or FakeClock()
        self.store: dict[str, tuple[bytes, float]] = {}
        self.ttls: dict[str, int] = {}
        self.set_calls = 0
        self.delete_calls: list[tuple[str, ...]] = []

    async def get(self, key: str) -> bytes | None:
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self.store[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self.set_calls += 1
        self.ttls[key] = ttl
        self.store[key] = (value, self.clock() + ttl)

    async def delete(self, *keys: str) -> None:
        self.delete_calls.append(keys)
        for key in keys:
            self.store.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.store.clear()


class FailingBackend:
    """CacheBackend whose every call fails."""

    def __init__(self) -> None:
        self.calls = 0

    async def get(self, key: str) -> bytes | None:
        self.calls += 1
        raise CacheBackendError("connection refused")

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self.calls += 1
        raise CacheBackendError("connection refused")

    async def delete(self, *keys: str) -> None:
        self.calls += 1
        raise CacheBackendError("connection refused")

    async def ping(self) -> bool:
        self.calls += 1
        raise CacheBackendError("connection refused")

    async def close(self) -> None:
        return None


def make_course(course_id: UUID | None = None, title: str = "Intro to Python", **overrides) -> Course:
    data = {
        "id": course_id or uuid4(),
        "title": title,
        "description": "Learn the basics",
        "difficulty": Difficulty.BEGINNER,
        "image_url": None,
        "created_at": datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
    }
    data.update(overrides)
    return Course(**data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_backend(clock: FakeClock) -> InMemoryBackend:
    return InMemoryBackend(clock)


@pytest.fixture
def failing_backend() -> FailingBackend:
    return FailingBackend()


@pytest.fixture
def course_cache(memory_backend: InMemoryBackend) -> CacheAside[Course]:
    return CacheAside(memory_backend, ModelCodec(Course), kind="course", list_tags=("courses",))


@pytest.fixture
def failing_cache(failing_backend: FailingBackend) -> CacheAside[Course]:
    return CacheAside(failing_backend, ModelCodec(Course), kind="course", list_tags=("courses",))


@pytest.fixture
def course_factory():
    """Build Course values with sensible defaults."""
    return make_course
