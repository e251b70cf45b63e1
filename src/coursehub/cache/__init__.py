"""Cache layer for CourseHub.

Provides a Redis look-aside cache in front of the course catalog:
- Deterministic keys ("course:<id>", "courses:all")
- JSON codec over the pydantic models
- TTL on every entry, invalidation after every write
- Backend failures degrade to cache misses, never to request failures
"""

from coursehub.cache.aside import CacheAside, create_course_cache
from coursehub.cache.backend import (
    CacheBackend,
    NullBackend,
    RedisBackend,
    create_backend,
    create_redis_client,
)
from coursehub.cache.codec import ModelCodec
from coursehub.cache.errors import (
    CacheBackendError,
    CacheError,
    CacheTimeoutError,
    CodecError,
    InvalidCacheKeyError,
)
from coursehub.cache.keys import COURSE_KIND, COURSE_LIST_TAG, CacheKeys

__all__ = [
    # Layer
    "CacheAside",
    "create_course_cache",
    # Backends
    "CacheBackend",
    "NullBackend",
    "RedisBackend",
    "create_backend",
    "create_redis_client",
    # Keys and codec
    "CacheKeys",
    "COURSE_KIND",
    "COURSE_LIST_TAG",
    "ModelCodec",
    # Errors
    "CacheError",
    "CacheBackendError",
    "CacheTimeoutError",
    "CodecError",
    "InvalidCacheKeyError",
]
