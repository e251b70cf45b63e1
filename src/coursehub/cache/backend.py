"""Backing store clients for the cache layer.

Provides the ``CacheBackend`` protocol consumed by the cache-aside layer and a
Redis implementation built on the redis-py async client. Every Redis command
runs under a hard time budget so that a slow cache can never stall a request;
timeouts and connection failures surface as ``CacheBackendError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol, TypeVar, cast

import redis.asyncio as redis
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from coursehub.cache.errors import CacheBackendError, CacheTimeoutError

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from coursehub.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 0.25


class CacheBackend(Protocol):
    """Keyed byte store with per-key expiry."""

    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if the key is absent."""
        ...

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store bytes under key, expiring after ttl seconds."""
        ...

    async def delete(self, *keys: str) -> None:
        """Remove keys. Absent keys are not an error."""
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...


def create_redis_client(settings: Settings) -> Redis:
    """Build a Redis client from settings.

    Socket timeouts are set on the connection pool; ``RedisBackend`` adds an
    overall per-command budget on top.
    """
    return redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        password=settings.resolved_redis_password,
        decode_responses=False,  # We're storing bytes
        socket_timeout=settings.cache_timeout,
        socket_connect_timeout=settings.cache_timeout,
        retry_on_timeout=False,
    )


class RedisBackend:
    """``CacheBackend`` over a redis-py asyncio client."""

    def __init__(self, client: Redis, timeout: float = DEFAULT_TIMEOUT):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.client = client
        self.timeout = timeout

    async def _run(self, command: str, awaitable: Awaitable[T]) -> T:
        try:
            async with asyncio.timeout(self.timeout):
                return await awaitable
        except (TimeoutError, RedisTimeoutError) as e:
            raise CacheTimeoutError(f"Redis {command} timed out after {self.timeout}s") from e
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"Redis {command} failed: {e}") from e

    async def get(self, key: str) -> bytes | None:
        return cast(bytes | None, await self._run("GET", self.client.get(key)))

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        await self._run("SET", self.client.set(key, value, ex=ttl))

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        await self._run("DEL", self.client.delete(*keys))

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self._run("PING", cast(Awaitable[bool], self.client.ping()))
            return True
        except CacheBackendError:
            return False

    async def close(self) -> None:
        """Close Redis connections."""
        await self.client.aclose()


class NullBackend:
    """Backend used when caching is disabled: stores nothing, always misses."""

    async def get(self, key: str) -> bytes | None:
        return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        return None

    async def delete(self, *keys: str) -> None:
        return None

    async def ping(self) -> bool:
        return False

    async def close(self) -> None:
        return None


def create_backend(settings: Settings) -> CacheBackend:
    """Create the configured cache backend."""
    if not settings.cache_enabled:
        logger.info("Cache disabled by configuration")
        return NullBackend()
    return RedisBackend(create_redis_client(settings), timeout=settings.cache_timeout)
