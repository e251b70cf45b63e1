"""Tests for cache backends."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from coursehub.cache.backend import NullBackend, RedisBackend, create_backend
from coursehub.cache.errors import CacheBackendError, CacheTimeoutError
from coursehub.config import Settings


@pytest.fixture
def redis_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def backend(redis_client: AsyncMock) -> RedisBackend:
    return RedisBackend(redis_client, timeout=0.05)


class TestRedisBackend:
    """Test RedisBackend against a mocked client."""

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """GET passes the stored bytes through."""
        redis_client.get.return_value = b"payload"
        assert await backend.get("course:1") == b"payload"
        redis_client.get.assert_awaited_once_with("course:1")

    @pytest.mark.asyncio
    async def test_get_absent(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """Absent key is None."""
        redis_client.get.return_value = None
        assert await backend.get("course:1") is None

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """SET always carries an expiry."""
        await backend.set("course:1", b"payload", 900)
        redis_client.set.assert_awaited_once_with("course:1", b"payload", ex=900)

    @pytest.mark.asyncio
    async def test_set_rejects_non_positive_ttl(self, backend: RedisBackend) -> None:
        """An entry without expiry is refused."""
        with pytest.raises(ValueError):
            await backend.set("course:1", b"payload", 0)

    @pytest.mark.asyncio
    async def test_delete_many(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """DEL receives every key in one call."""
        await backend.delete("courses:all", "featured:all")
        redis_client.delete.assert_awaited_once_with("courses:all", "featured:all")

    @pytest.mark.asyncio
    async def test_delete_nothing(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """No keys means no round trip."""
        await backend.delete()
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        """Connection errors surface as CacheBackendError."""
        redis_client.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(CacheBackendError):
            await backend.get("course:1")

    @pytest.mark.asyncio
    async def test_redis_timeout_wrapped(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        """Socket timeouts surface as CacheTimeoutError."""
        redis_client.get.side_effect = RedisTimeoutError("socket timeout")
        with pytest.raises(CacheTimeoutError):
            await backend.get("course:1")

    @pytest.mark.asyncio
    async def test_slow_command_times_out(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        """A command exceeding the time budget is abandoned."""

        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return b"late"

        redis_client.get.side_effect = slow
        with pytest.raises(CacheTimeoutError):
            await backend.get("course:1")

    @pytest.mark.asyncio
    async def test_ping(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """Ping reports connectivity without raising."""
        redis_client.ping.return_value = True
        assert await backend.ping() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await backend.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        """Close releases the client's connections."""
        await backend.close()
        redis_client.aclose.assert_awaited_once()

    def test_timeout_must_be_positive(self, redis_client: AsyncMock) -> None:
        """A zero budget is refused."""
        with pytest.raises(ValueError):
            RedisBackend(redis_client, timeout=0)


class TestNullBackend:
    """Test the disabled-cache backend."""

    @pytest.mark.asyncio
    async def test_always_misses(self) -> None:
        """Writes are dropped and reads miss."""
        backend = NullBackend()
        await backend.set("course:1", b"payload", 900)
        assert await backend.get("course:1") is None
        await backend.delete("course:1")
        assert await backend.ping() is False


class TestCreateBackend:
    """Test backend selection from settings."""

    def test_disabled(self) -> None:
        """Disabled caching yields the null backend."""
        assert isinstance(create_backend(Settings(CACHE_ENABLED=False)), NullBackend)

    def test_enabled(self) -> None:
        """Enabled caching yields a Redis backend with the configured budget."""
        backend = create_backend(Settings(CACHE_ENABLED=True, CACHE_TIMEOUT=0.5))
        assert isinstance(backend, RedisBackend)
        assert backend.timeout == 0.5
