"""Cache error taxonomy.

Operational failures (backend, timeout, codec) are absorbed by the
cache-aside layer and never reach the request path. ``InvalidCacheKeyError``
signals a caller bug and is always raised.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache failures."""


class CacheBackendError(CacheError):
    """The backing store could not be reached or rejected a command."""


class CacheTimeoutError(CacheBackendError):
    """A backing store command exceeded its time budget."""


class CodecError(CacheError):
    """Cached bytes could not be encoded or decoded."""


class InvalidCacheKeyError(ValueError):
    """A cache key could not be built from the given identifier or tag."""
