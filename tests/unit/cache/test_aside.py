"""Tests for the cache-aside layer."""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from coursehub.cache import CacheAside, CacheTimeoutError, InvalidCacheKeyError, ModelCodec
from coursehub.cache.aside import create_course_cache
from coursehub.config import Settings
from coursehub.core.model import Course


class TestEntities:
    """get_entity / put_entity / invalidate_entity."""

    @pytest.mark.asyncio
    async def test_miss_on_empty_cache(self, course_cache: CacheAside[Course]) -> None:
        """Unknown key is a miss."""
        assert await course_cache.get_entity(uuid4()) is None

    @pytest.mark.asyncio
    async def test_put_then_get(self, course_cache: CacheAside[Course], course_factory) -> None:
        """A stored entity is returned unchanged."""
        course = course_factory()
        await course_cache.put_entity(course.id, course)
        assert await course_cache.get_entity(course.id) == course

    @pytest.mark.asyncio
    async def test_uuid_and_string_ids_share_entry(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """Identifiers are normalized before building the key."""
        course = course_factory()
        await course_cache.put_entity(course.id, course)
        assert await course_cache.get_entity(str(course.id)) == course

    @pytest.mark.asyncio
    async def test_invalidate_then_miss(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """An invalidated entity reads as a miss."""
        course = course_factory()
        await course_cache.put_entity(course.id, course)
        await course_cache.invalidate_entity(course.id)
        assert await course_cache.get_entity(course.id) is None

    @pytest.mark.asyncio
    async def test_invalidate_absent_key(self, course_cache: CacheAside[Course]) -> None:
        """Invalidating a key that was never cached is fine."""
        await course_cache.invalidate_entity(uuid4())

    @pytest.mark.asyncio
    async def test_entry_lives_until_ttl(
        self, course_cache: CacheAside[Course], memory_backend, clock, course_factory
    ) -> None:
        """course:123 is served for its whole 900s TTL and expires after it."""
        course = course_factory(title="Go")
        await course_cache.put_entity(123, course)

        assert memory_backend.ttls["course:123"] == 900
        clock.advance(899)
        assert await course_cache.get_entity(123) == course
        clock.advance(1)
        assert await course_cache.get_entity(123) is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self, course_cache: CacheAside[Course], course_factory) -> None:
        """A second put replaces the first value."""
        course = course_factory(title="Old")
        await course_cache.put_entity(course.id, course)
        updated = course.model_copy(update={"title": "New"})
        await course_cache.put_entity(course.id, updated)
        assert (await course_cache.get_entity(course.id)).title == "New"

    @pytest.mark.asyncio
    async def test_concurrent_identical_puts_converge(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """Two racing populators with the same value leave that value cached."""
        course = course_factory()

        async def read_through() -> Course:
            cached = await course_cache.get_entity(course.id)
            if cached is not None:
                return cached
            await asyncio.sleep(0)
            await course_cache.put_entity(course.id, course)
            return course

        results = await asyncio.gather(read_through(), read_through())

        assert results == [course, course]
        assert await course_cache.get_entity(course.id) == course

    @pytest.mark.asyncio
    async def test_read_before_invalidation_may_be_stale(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """A read that wins the race sees the old value; later reads miss and repopulate."""
        old = course_factory(title="Old title")
        new = old.model_copy(update={"title": "New title"})
        await course_cache.put_entity(old.id, old)

        # Store write happens here; the read below started before invalidation
        stale = await course_cache.get_entity(old.id)
        await course_cache.invalidate_entity(old.id)

        assert stale == old
        assert await course_cache.get_entity(old.id) is None
        await course_cache.put_entity(old.id, new)
        assert (await course_cache.get_entity(old.id)).title == "New title"

    @pytest.mark.asyncio
    async def test_empty_identifier_raises(self, course_cache: CacheAside[Course]) -> None:
        """Empty identifiers are a programmer error, not a miss."""
        with pytest.raises(InvalidCacheKeyError):
            await course_cache.get_entity("")

    @pytest.mark.asyncio
    async def test_empty_identifier_raises_on_failing_backend(
        self, failing_cache: CacheAside[Course], course_factory
    ) -> None:
        """Key errors are raised even when the backend is down."""
        with pytest.raises(InvalidCacheKeyError):
            await failing_cache.put_entity("", course_factory())


class TestLists:
    """get_list / put_list / invalidate_all_lists."""

    @pytest.mark.asyncio
    async def test_put_then_get(self, course_cache: CacheAside[Course], course_factory) -> None:
        """A stored snapshot keeps its order."""
        courses = [course_factory(title="A"), course_factory(title="B")]
        await course_cache.put_list("courses", courses)
        assert await course_cache.get_list("courses") == courses

    @pytest.mark.asyncio
    async def test_default_tag(
        self, course_cache: CacheAside[Course], memory_backend, course_factory
    ) -> None:
        """Omitting the tag uses the first configured one."""
        await course_cache.put_list(None, [course_factory()])
        assert "courses:all" in memory_backend.store
        assert await course_cache.get_list() is not None

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit(self, course_cache: CacheAside[Course]) -> None:
        """An empty snapshot is distinct from a miss."""
        await course_cache.put_list("courses", [])
        assert await course_cache.get_list("courses") == []

    @pytest.mark.asyncio
    async def test_create_invalidates_snapshot(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """After a create, the snapshot misses and repopulates with the new course."""
        a, b, c = course_factory(title="A"), course_factory(title="B"), course_factory(title="C")
        await course_cache.put_list("courses", [a, b])

        # Course C is created in the store, then lists are dropped
        await course_cache.invalidate_all_lists()
        assert await course_cache.get_list("courses") is None

        await course_cache.put_list("courses", [c, a, b])
        assert c in await course_cache.get_list("courses")

    @pytest.mark.asyncio
    async def test_invalidate_all_lists_single_delete(
        self, memory_backend, course_factory
    ) -> None:
        """Every owned snapshot is dropped in one backend call."""
        cache = CacheAside(
            memory_backend, ModelCodec(Course), kind="course", list_tags=("courses", "featured")
        )
        await cache.put_list("courses", [course_factory()])
        await cache.put_list("featured", [course_factory()])

        await cache.invalidate_all_lists()

        assert memory_backend.delete_calls == [("courses:all", "featured:all")]
        assert await cache.get_list("courses") is None
        assert await cache.get_list("featured") is None

    @pytest.mark.asyncio
    async def test_invalidate_lists_keeps_entities(
        self, course_cache: CacheAside[Course], course_factory
    ) -> None:
        """List invalidation does not touch entity entries."""
        course = course_factory()
        await course_cache.put_entity(course.id, course)
        await course_cache.invalidate_all_lists()
        assert await course_cache.get_entity(course.id) == course

    @pytest.mark.asyncio
    async def test_unknown_tag_raises(self, course_cache: CacheAside[Course]) -> None:
        """Tags outside the configured set are a programmer error."""
        with pytest.raises(InvalidCacheKeyError):
            await course_cache.get_list("students")

    @pytest.mark.asyncio
    async def test_no_tags_configured(self, memory_backend) -> None:
        """A layer without list tags has nothing to invalidate."""
        cache = CacheAside(memory_backend, ModelCodec(Course), kind="course")
        await cache.invalidate_all_lists()
        assert memory_backend.delete_calls == []
        with pytest.raises(InvalidCacheKeyError):
            await cache.get_list()


class TestFailurePolicy:
    """Backend failures degrade to misses and no-ops."""

    @pytest.mark.asyncio
    async def test_failing_backend_never_raises(
        self, failing_cache: CacheAside[Course], failing_backend, course_factory
    ) -> None:
        """Every operation completes against a backend that always errors."""
        course = course_factory()

        assert await failing_cache.get_entity(course.id) is None
        assert await failing_cache.get_list() is None
        await failing_cache.put_entity(course.id, course)
        await failing_cache.put_list(None, [course])
        await failing_cache.invalidate_entity(course.id)
        await failing_cache.invalidate_all_lists()
        assert await failing_cache.health_check() is False

        assert failing_backend.calls == 7

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(
        self, course_cache: CacheAside[Course], memory_backend
    ) -> None:
        """Undecodable bytes read as a miss."""
        await memory_backend.set("course:42", b"{not json", 900)
        assert await course_cache.get_entity(42) is None

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_is_a_miss(
        self, course_cache: CacheAside[Course], memory_backend
    ) -> None:
        """A snapshot of the wrong shape reads as a miss."""
        await memory_backend.set("courses:all", b'{"id": 1}', 900)
        assert await course_cache.get_list() is None

    @pytest.mark.asyncio
    async def test_timeout_is_a_miss(self, course_factory) -> None:
        """A backend timeout reads as a miss."""

        class SlowBackend:
            async def get(self, key: str) -> bytes | None:
                raise CacheTimeoutError("GET timed out")

        cache = CacheAside(SlowBackend(), ModelCodec(Course), kind="course")  # type: ignore[arg-type]
        assert await cache.get_entity(1) is None

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        """Cancelling the caller is not absorbed as a miss."""
        started = asyncio.Event()

        class HangingBackend:
            async def get(self, key: str) -> bytes | None:
                started.set()
                await asyncio.sleep(3600)
                return None

        cache = CacheAside(HangingBackend(), ModelCodec(Course), kind="course")  # type: ignore[arg-type]
        task = asyncio.create_task(cache.get_entity(1))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestConstruction:
    """Constructor validation and settings wiring."""

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_rejected(self, memory_backend, ttl: int) -> None:
        """Every entry must carry a positive TTL."""
        with pytest.raises(ValueError):
            CacheAside(memory_backend, ModelCodec(Course), kind="course", entity_ttl=ttl)
        with pytest.raises(ValueError):
            CacheAside(memory_backend, ModelCodec(Course), kind="course", list_ttl=ttl)

    def test_empty_kind_rejected(self, memory_backend) -> None:
        """An empty kind fails at construction time."""
        with pytest.raises(InvalidCacheKeyError):
            CacheAside(memory_backend, ModelCodec(Course), kind="")

    @pytest.mark.asyncio
    async def test_create_course_cache_uses_settings(
        self, memory_backend, course_factory
    ) -> None:
        """TTLs come from settings."""
        settings = Settings(CACHE_ENTITY_TTL=60, CACHE_LIST_TTL=30)
        cache = create_course_cache(memory_backend, settings)
        course = course_factory()

        await cache.put_entity(course.id, course)
        await cache.put_list(None, [course])

        assert memory_backend.ttls[f"course:{course.id}"] == 60
        assert memory_backend.ttls["courses:all"] == 30
