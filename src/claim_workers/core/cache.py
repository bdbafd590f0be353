"""Cache backends for remote lookups.

Two interchangeable backends share the same async interface
(``get``/``set``/``delete``): an in-process TTL store used by default and a
Redis store used when a Redis URL is configured. Values are JSON-compatible
structures, so both backends hold exactly the same data.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections import OrderedDict
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings

__all__ = [
    "CacheConfig",
    "InMemoryCache",
    "RedisCache",
    "Cache",
    "create_cache",
    "RedisType",
]

if TYPE_CHECKING:
    from redis.asyncio import Redis as RedisType
else:
    RedisType = redis.Redis


@frozen
class CacheConfig:
    """Immutable cache configuration."""

    default_ttl: int = field(default=300)
    max_entries: int = field(default=10_000)
    key_prefix: str = field(default="claim-workers")
    url: str | None = field(default=None)

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "CacheConfig":
        """Build cache configuration from application settings."""
        return cls(
            default_ttl=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
            url=settings.redis_url,
        )


class InMemoryCache:
    """In-process cache with per-entry TTL and a bounded number of entries.

    The oldest entry is evicted once ``max_entries`` is reached.
    """

    def __init__(self, config: CacheConfig | None = None) -> None:
        """Initialize an empty store."""
        self._config = config or CacheConfig()
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = asyncio.Lock()

    @beartype
    async def connect(self) -> None:
        """No-op, kept for interface parity with the Redis backend."""

    @beartype
    async def disconnect(self) -> None:
        """Drop every entry."""
        async with self._lock:
            self._entries.clear()

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get value from cache, ``None`` when absent or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, value = entry
            if expires_at <= time.monotonic():
                del self._entries[key]
                return None
            return value

    @beartype
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value in cache with optional TTL."""
        if ttl is None:
            ttl = self._config.default_ttl
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())

        async with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self._config.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (time.monotonic() + ttl, value)
        return True

    @beartype
    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        async with self._lock:
            return self._entries.pop(key, None) is not None

    @beartype
    async def health_check(self) -> bool:
        """Perform cache health check."""
        return True


class RedisCache:
    """Redis cache manager with async support.

    The constructor optionally accepts an already-created
    ``redis.asyncio.Redis`` instance; :py:meth:`connect` is then a no-op.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        redis_client: RedisType | None = None,
    ) -> None:
        """Create a cache wrapper."""
        self._config = config or CacheConfig(url=get_settings().redis_url)
        self._redis: RedisType | None = redis_client

    @beartype
    async def connect(self) -> None:
        """Create Redis connection pool."""
        if self._redis is not None:
            return
        if not self._config.url:
            raise RuntimeError("Redis URL is not configured")

        self._redis = redis.from_url(self._config.url, decode_responses=True)

    @beartype
    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis is None:
            return

        await self._redis.aclose()
        self._redis = None

    def _key(self, key: str) -> str:
        return f"{self._config.key_prefix}:{key}"

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get value from cache."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        value = await self._redis.get(self._key(key))
        if value is None:
            return None

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    @beartype
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value in cache with optional TTL."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        if ttl is None:
            ttl = self._config.default_ttl
        if isinstance(ttl, int):
            ttl = timedelta(seconds=ttl)

        result = await self._redis.setex(
            self._key(key), ttl, json.dumps(value, default=str)
        )
        return bool(result)

    @beartype
    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        result = await self._redis.delete(self._key(key))
        return bool(result > 0)

    @beartype
    async def health_check(self) -> bool:
        """Perform cache health check."""
        try:
            if self._redis is None:
                return False

            await self._redis.ping()
            return True
        except Exception:
            return False


Cache = InMemoryCache | RedisCache


@beartype
def create_cache(settings: Settings | None = None) -> InMemoryCache | RedisCache:
    """Create the cache backend selected by settings."""
    config = CacheConfig.from_settings(settings or get_settings())
    if config.url:
        return RedisCache(config)
    return InMemoryCache(config)
