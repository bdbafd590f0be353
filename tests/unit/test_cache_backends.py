"""Unit tests for the in-memory and Redis cache backends."""

from datetime import timedelta

import pytest

from claim_workers.core.cache import (
    CacheConfig,
    InMemoryCache,
    RedisCache,
    create_cache,
)
from claim_workers.core.config import Settings


class TestInMemoryCache:
    """Test the in-process cache backend."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self, memory_cache: InMemoryCache) -> None:
        """Values round-trip until deleted."""
        assert await memory_cache.set("customer:1", {"found": True, "value": {"id": 1}})
        assert await memory_cache.get("customer:1") == {"found": True, "value": {"id": 1}}

        assert await memory_cache.delete("customer:1")
        assert await memory_cache.get("customer:1") is None
        assert not await memory_cache.delete("customer:1")

    @pytest.mark.asyncio
    async def test_expired_entries_are_dropped(self, memory_cache: InMemoryCache) -> None:
        """An entry with no time left is a miss."""
        await memory_cache.set("policy:number:POL-1", {"found": False}, ttl=0)

        assert await memory_cache.get("policy:number:POL-1") is None

    @pytest.mark.asyncio
    async def test_timedelta_ttl(self, memory_cache: InMemoryCache) -> None:
        """TTLs may be given as timedelta."""
        await memory_cache.set("customer:2", {"found": False}, ttl=timedelta(minutes=5))
        assert await memory_cache.get("customer:2") == {"found": False}

    @pytest.mark.asyncio
    async def test_oldest_entry_evicted(self) -> None:
        """The store never grows past max_entries."""
        cache = InMemoryCache(CacheConfig(max_entries=2))

        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.set("c", 3)

        assert await cache.get("a") is None
        assert await cache.get("b") == 2
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_always_healthy(self, memory_cache: InMemoryCache) -> None:
        """The in-process backend has nothing to lose contact with."""
        assert await memory_cache.health_check()


class TestRedisCache:
    """Test the Redis backend against fakeredis."""

    @pytest.mark.asyncio
    async def test_values_are_stored_as_json(self, redis_cache: RedisCache) -> None:
        """Structures survive the JSON round trip."""
        envelope = {"found": True, "value": {"id": 7, "status": "IN_REVIEW"}}

        assert await redis_cache.set("claim:home:7", envelope)
        assert await redis_cache.get("claim:home:7") == envelope

    @pytest.mark.asyncio
    async def test_missing_key(self, redis_cache: RedisCache) -> None:
        """Absent keys read as None."""
        assert await redis_cache.get("claim:home:404") is None

    @pytest.mark.asyncio
    async def test_delete(self, redis_cache: RedisCache) -> None:
        """Deleting one key leaves the others alone."""
        await redis_cache.set("customer:1", {"found": False})
        await redis_cache.set("policy:number:POL-1", {"found": False})

        assert await redis_cache.delete("customer:1")
        assert not await redis_cache.delete("customer:1")
        assert await redis_cache.get("customer:1") is None
        assert await redis_cache.get("policy:number:POL-1") == {"found": False}

    @pytest.mark.asyncio
    async def test_health_check(self, redis_cache: RedisCache) -> None:
        """A reachable server is healthy."""
        assert await redis_cache.health_check()

    @pytest.mark.asyncio
    async def test_not_connected(self) -> None:
        """Using the cache before connect is an error."""
        cache = RedisCache(CacheConfig(url="redis://localhost:6379/0"))

        assert not await cache.health_check()
        with pytest.raises(RuntimeError, match="Cache not connected"):
            await cache.get("customer:1")

    @pytest.mark.asyncio
    async def test_connect_requires_url(self) -> None:
        """Connecting without a URL fails loudly."""
        with pytest.raises(RuntimeError, match="Redis URL is not configured"):
            await RedisCache(CacheConfig()).connect()


class TestCreateCache:
    """Test backend selection."""

    def test_in_memory_without_redis_url(self) -> None:
        """The in-process cache is the default."""
        assert isinstance(create_cache(Settings()), InMemoryCache)

    def test_redis_with_url(self) -> None:
        """A Redis URL selects the Redis backend."""
        cache = create_cache(Settings(redis_url="redis://cache:6379/0"))
        assert isinstance(cache, RedisCache)
