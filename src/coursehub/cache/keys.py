"""Cache key schema for CourseHub.

Key format:
- entity:   {kind}:{identifier}   e.g. "course:123e4567-e89b-12d3-a456-426614174000"
- snapshot: {tag}:all             e.g. "courses:all"

Identifiers are stringified, so a UUID and its canonical string form map to
the same key.
"""

from __future__ import annotations

from uuid import UUID

from coursehub.cache.errors import InvalidCacheKeyError

Identifier = UUID | str | int

SNAPSHOT_SUFFIX = "all"

COURSE_KIND = "course"
COURSE_LIST_TAG = "courses"


def _normalize(value: Identifier, what: str) -> str:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise InvalidCacheKeyError(f"{what} must be a UUID, str or int, got {type(value).__name__}")
    text = str(value).strip()
    if not text:
        raise InvalidCacheKeyError(f"{what} must not be empty")
    if ":" in text and what == "kind":
        raise InvalidCacheKeyError("kind must not contain ':'")
    return text


class CacheKeys:
    """Cache key generator following a consistent naming convention."""

    @classmethod
    def entity(cls, kind: str, identifier: Identifier) -> str:
        """Key for a single entity."""
        kind_part = _normalize(kind, "kind")
        id_part = _normalize(identifier, "identifier")
        if id_part == SNAPSHOT_SUFFIX:
            raise InvalidCacheKeyError(f"identifier '{SNAPSHOT_SUFFIX}' is reserved for snapshots")
        return f"{kind_part}:{id_part}"

    @classmethod
    def snapshot(cls, tag: str) -> str:
        """Key for a full collection snapshot."""
        return f"{_normalize(tag, 'kind')}:{SNAPSHOT_SUFFIX}"
