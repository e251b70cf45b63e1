"""Cache-aside (look-aside) layer for CourseHub.

The relational store stays authoritative; this layer only remembers the last
value read for a key and forgets it when a write invalidates it:

- Reads call ``get_entity``/``get_list``; ``None`` means Miss and the caller
  loads from the store, then calls ``put_entity``/``put_list``.
- Writes commit to the store first, then call ``invalidate_entity`` and/or
  ``invalidate_all_lists``.
- Every entry is written with a TTL, which bounds staleness when a read that
  overlapped a write re-populates an old value.

Backend failures never reach the caller. A timeout, a connection error or
undecodable bytes all read as Miss, and a failed put or delete is logged and
dropped, so an unreachable backend degrades the service to "cache disabled".
Only programmer errors (empty identifiers, unknown list tags, bad TTLs) are
raised.

Example:
    cache = CacheAside(backend, ModelCodec(Course), kind="course", list_tags=("courses",))

    course = await cache.get_entity(course_id)
    if course is None:
        course = await repo.get(course_id)
        await cache.put_entity(course_id, course)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel

from coursehub.cache.codec import ModelCodec
from coursehub.cache.errors import InvalidCacheKeyError
from coursehub.cache.keys import COURSE_KIND, COURSE_LIST_TAG, CacheKeys, Identifier
from coursehub.core.model import Course
from coursehub.observability.metrics import (
    record_cache_error,
    record_cache_hit,
    record_cache_miss,
    record_cache_operation,
)

if TYPE_CHECKING:
    from coursehub.cache.backend import CacheBackend
    from coursehub.config import Settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R")

# Default TTL (15 minutes)
DEFAULT_TTL = 900


class CacheAside(Generic[M]):
    """Get-or-populate and invalidate primitives over one entity kind.

    Holds no mutable state; all state lives in the backend, so one instance
    can be shared by any number of concurrent requests and service replicas.
    """

    def __init__(
        self,
        backend: CacheBackend,
        codec: ModelCodec[M],
        kind: str,
        list_tags: Sequence[str] = (),
        entity_ttl: int = DEFAULT_TTL,
        list_ttl: int = DEFAULT_TTL,
    ):
        if entity_ttl <= 0 or list_ttl <= 0:
            raise ValueError("cache TTLs must be positive")
        self.backend = backend
        self.codec = codec
        self.kind = kind
        self.list_tags = tuple(list_tags)
        self.entity_ttl = entity_ttl
        self.list_ttl = list_ttl
        # Fail fast on an unusable kind or tag
        CacheKeys.entity(kind, "check")
        self._snapshot_keys = tuple(CacheKeys.snapshot(tag) for tag in self.list_tags)

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def entity_key(self, identifier: Identifier) -> str:
        return CacheKeys.entity(self.kind, identifier)

    def list_key(self, tag: str | None = None) -> str:
        """Snapshot key for tag (the first owned tag when omitted)."""
        if tag is None:
            if not self.list_tags:
                raise InvalidCacheKeyError(f"no list tags configured for '{self.kind}'")
            tag = self.list_tags[0]
        if tag not in self.list_tags:
            raise InvalidCacheKeyError(f"unknown list tag '{tag}' for '{self.kind}'")
        return CacheKeys.snapshot(tag)

    # -------------------------------------------------------------------------
    # Failure policy
    # -------------------------------------------------------------------------

    async def _guard(self, operation: str, key: str, call: Callable[[], Awaitable[R]]) -> R | None:
        """Run one backend interaction, absorbing any failure.

        Returns None when the call fails. Cancellation is not absorbed.
        """
        started = time.perf_counter()
        try:
            return await call()
        except Exception as e:
            record_cache_error(operation)
            logger.warning(
                "Cache %s failed for %s, falling back to the store: %s",
                operation,
                key,
                e,
            )
            return None
        finally:
            record_cache_operation(operation, time.perf_counter() - started)

    async def _read(self, operation: str, key: str, decode: Callable[[bytes], R]) -> R | None:
        async def call() -> R | None:
            data = await self.backend.get(key)
            if data is None:
                return None
            return decode(data)

        value = await self._guard(operation, key, call)
        if value is None:
            record_cache_miss(self.kind)
            logger.debug("Cache miss: %s", key)
        else:
            record_cache_hit(self.kind)
            logger.debug("Cache hit: %s", key)
        return value

    async def _write(self, operation: str, key: str, encode: Callable[[], bytes], ttl: int) -> None:
        async def call() -> None:
            await self.backend.set(key, encode(), ttl)

        await self._guard(operation, key, call)

    async def _delete(self, operation: str, *keys: str) -> None:
        async def call() -> None:
            await self.backend.delete(*keys)

        await self._guard(operation, ",".join(keys), call)

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    async def get_entity(self, identifier: Identifier) -> M | None:
        """Return the cached entity, or None on miss or any cache failure."""
        key = self.entity_key(identifier)
        return await self._read("get", key, self.codec.decode)

    async def put_entity(self, identifier: Identifier, value: M) -> None:
        """Cache an entity with the entity TTL. Best effort."""
        key = self.entity_key(identifier)
        await self._write("set", key, lambda: self.codec.encode(value), self.entity_ttl)

    async def invalidate_entity(self, identifier: Identifier) -> None:
        """Drop a cached entity after it was updated or deleted. Best effort."""
        key = self.entity_key(identifier)
        await self._delete("delete", key)

    # -------------------------------------------------------------------------
    # Collection snapshots
    # -------------------------------------------------------------------------

    async def get_list(self, tag: str | None = None) -> list[M] | None:
        """Return a cached snapshot, or None on miss or any cache failure.

        An empty list is a hit.
        """
        key = self.list_key(tag)
        return await self._read("get_list", key, self.codec.decode_many)

    async def put_list(self, tag: str | None, values: Sequence[M]) -> None:
        """Cache a snapshot with the list TTL. Best effort."""
        key = self.list_key(tag)
        snapshot = list(values)
        await self._write("set_list", key, lambda: self.codec.encode_many(snapshot), self.list_ttl)

    async def invalidate_all_lists(self) -> None:
        """Drop every snapshot this layer owns. Best effort.

        Snapshots are never patched per item; any write that may change a
        list's contents or order drops them all.
        """
        if not self._snapshot_keys:
            return
        await self._delete("delete_lists", *self._snapshot_keys)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def health_check(self) -> bool:
        """Check backend connectivity. Never raises."""
        result = await self._guard("ping", "-", self.backend.ping)
        return bool(result)


def create_course_cache(backend: CacheBackend, settings: Settings) -> CacheAside[Course]:
    """Build the course cache from resolved settings."""
    return CacheAside(
        backend,
        ModelCodec(Course),
        kind=COURSE_KIND,
        list_tags=(COURSE_LIST_TAG,),
        entity_ttl=settings.cache_entity_ttl,
        list_ttl=settings.cache_list_ttl,
    )
