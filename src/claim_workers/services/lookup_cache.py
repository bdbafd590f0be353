"""Read-through cache for remote lookups with write-triggered invalidation.

Entries are stored as envelopes so that an explicit "not found" answer can
be cached too::

    {"found": True, "value": {...}}   # entity returned by the remote
    {"found": False}                  # remote said it does not exist

Failed loads (``Err`` results or raised exceptions) are never stored.

While a load is in flight its key carries a generation counter. Writers
bump it when they invalidate or replace the entry, and a load that
started before the bump drops its result instead of storing it. A read
that follows a successful write therefore never sees the pre-write value,
even when an older load was still in flight. Counters are dropped with the
last load of a key and locks are striped, so this bookkeeping stays bounded
however many ids pass through.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from beartype import beartype
from pydantic import BaseModel

from ..core.cache import Cache
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from .cache_keys import CacheKeys, CacheKind

logger = get_logger(__name__)

LOCK_STRIPES = 64

Loader = Callable[[], Awaitable[Any]]
Decoder = Callable[[Any], Any]


def _check_id(kind: CacheKind, entity_id: int | str) -> None:
    if isinstance(entity_id, bool):
        raise ValueError(f"Invalid {kind.value} id: {entity_id!r}")
    if isinstance(entity_id, int) and entity_id <= 0:
        raise ValueError(f"{kind.value} id must be positive, but was: {entity_id}")
    if isinstance(entity_id, str) and not entity_id.strip():
        raise ValueError(f"{kind.value} key cannot be null or empty")


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


class LookupCache:
    """Cache of remote entities keyed by (kind, id)."""

    def __init__(self, cache: Cache, ttl_seconds: int | None = None) -> None:
        """Wrap a cache backend; ``ttl_seconds`` defaults to the backend's TTL."""
        self._cache = cache
        self._ttl = ttl_seconds
        self._locks = [asyncio.Lock() for _ in range(LOCK_STRIPES)]
        # only keys with a load in flight are tracked
        self._loading: dict[str, int] = {}
        self._generations: dict[str, int] = {}

    @beartype
    async def get(
        self,
        kind: CacheKind,
        entity_id: int | str,
        loader: Loader,
        decode: Decoder,
    ) -> Result[Any, str]:
        """Return the cached entity or load, store and return it.

        ``loader`` returns ``Ok(entity)``, ``Ok(None)`` for not found, or
        ``Err(message)``. ``decode`` rebuilds an entity from its cached JSON.
        An unreachable backend is treated as a miss.
        """
        _check_id(kind, entity_id)
        key = CacheKeys.entity(kind, entity_id)

        try:
            cached = await self._cache.get(key)
        except Exception as e:
            logger.warning("Cache read of %s failed, loading from remote: %s", key, e)
            cached = None
        if isinstance(cached, dict) and "found" in cached:
            logger.debug("Cache hit for %s", key)
            return Ok(decode(cached["value"]) if cached["found"] else None)

        self._loading[key] = self._loading.get(key, 0) + 1
        generation = self._generations.get(key, 0)
        try:
            result = await loader()
            if isinstance(result, Err):
                return result

            async with self._lock_for(key):
                if self._generations.get(key, 0) != generation:
                    logger.debug("Skipping store of %s, invalidated during load", key)
                    return result
                try:
                    await self._cache.set(key, self._envelope(result.value), self._ttl)
                except Exception as e:
                    logger.warning("Cache store of %s failed: %s", key, e)
            return result
        finally:
            self._loading[key] -= 1
            if not self._loading[key]:
                del self._loading[key]
                self._generations.pop(key, None)

    @beartype
    async def put(self, kind: CacheKind, entity_id: int | str, value: Any) -> None:
        """Replace the cached entity with a freshly written value."""
        _check_id(kind, entity_id)
        key = CacheKeys.entity(kind, entity_id)
        async with self._lock_for(key):
            self._bump(key)
            await self._cache.set(key, self._envelope(value), self._ttl)

    @beartype
    async def invalidate(self, kind: CacheKind, entity_id: int | str) -> None:
        """Drop the cached entity after a write to it."""
        _check_id(kind, entity_id)
        key = CacheKeys.entity(kind, entity_id)
        async with self._lock_for(key):
            self._bump(key)
            await self._cache.delete(key)
        logger.debug("Invalidated %s", key)

    @property
    def tracked_keys(self) -> int:
        """Keys with a load in flight."""
        return len(self._loading)

    def _lock_for(self, key: str) -> asyncio.Lock:
        return self._locks[hash(key) % LOCK_STRIPES]

    def _bump(self, key: str) -> None:
        if key in self._loading:
            self._generations[key] = self._generations.get(key, 0) + 1

    @staticmethod
    def _envelope(value: Any) -> dict[str, Any]:
        if value is None:
            return {"found": False}
        return {"found": True, "value": _encode(value)}
