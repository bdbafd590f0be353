"""Unit tests for the read-through lookup cache."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from claim_workers.core.cache import InMemoryCache
from claim_workers.core.result_types import Err, Ok
from claim_workers.models.claim import ClaimType
from claim_workers.models.party import Customer
from claim_workers.services.cache_keys import CacheKeys, CacheKind
from claim_workers.services.lookup_cache import LookupCache


def _decode_customer(data: Any) -> Customer:
    return Customer.model_validate(data)


class TestLookupCache:
    """Test cached reads, negative caching and invalidation."""

    @pytest.mark.asyncio
    async def test_second_read_is_served_from_cache(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """The loader runs once per key while the entry is live."""
        loader = AsyncMock(return_value=Ok(sample_customer))

        first = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)
        second = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        assert first.value == sample_customer
        assert second.value == sample_customer
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_found_is_cached(
        self, lookups: LookupCache, memory_cache: InMemoryCache
    ) -> None:
        """An explicit not-found answer is remembered."""
        loader = AsyncMock(return_value=Ok(None))

        assert (await lookups.get(CacheKind.CUSTOMER, 2, loader, _decode_customer)).value is None
        assert (await lookups.get(CacheKind.CUSTOMER, 2, loader, _decode_customer)).value is None

        loader.assert_awaited_once()
        assert await memory_cache.get(CacheKeys.entity(CacheKind.CUSTOMER, 2)) == {"found": False}

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """A failed load is retried on the next read."""
        loader = AsyncMock(side_effect=[Err("Customer service unavailable"), Ok(sample_customer)])

        failed = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)
        recovered = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        assert failed == Err("Customer service unavailable")
        assert recovered.value == sample_customer
        assert loader.await_count == 2

    @pytest.mark.asyncio
    async def test_loader_exception_propagates_uncached(self, lookups: LookupCache) -> None:
        """Exceptions reach the caller and leave nothing behind."""
        loader = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        ok_loader = AsyncMock(return_value=Ok(None))
        await lookups.get(CacheKind.CUSTOMER, 1, ok_loader, _decode_customer)
        ok_loader.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("entity_id", [0, -5, True, "", "   "])
    async def test_invalid_ids_are_rejected(
        self, lookups: LookupCache, entity_id: int | str
    ) -> None:
        """Invalid identifiers never reach the backend or the loader."""
        loader = AsyncMock(return_value=Ok(None))

        with pytest.raises(ValueError):
            await lookups.get(CacheKind.CUSTOMER, entity_id, loader, _decode_customer)
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidate_forces_reload(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """A read after invalidation goes back to the remote."""
        renamed = sample_customer.model_copy(update={"last_name": "Smith"})
        loader = AsyncMock(side_effect=[Ok(sample_customer), Ok(renamed)])

        await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)
        await lookups.invalidate(CacheKind.CUSTOMER, 1)
        result = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        assert result.value.last_name == "Smith"

    @pytest.mark.asyncio
    async def test_put_replaces_entry(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """A written entity is served without a remote read."""
        loader = AsyncMock(return_value=Ok(None))

        await lookups.put(CacheKind.CUSTOMER, 1, sample_customer)
        result = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        assert result.value == sample_customer
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_racing_an_invalidation_is_not_stored(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """A value read before a write never overwrites the invalidation."""
        stale = sample_customer
        fresh = sample_customer.model_copy(update={"email": "new@example.com"})
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_loader() -> Ok[Customer]:
            started.set()
            await release.wait()
            return Ok(stale)

        pending = asyncio.create_task(
            lookups.get(CacheKind.CUSTOMER, 1, slow_loader, _decode_customer)
        )
        await started.wait()
        await lookups.invalidate(CacheKind.CUSTOMER, 1)
        release.set()

        assert (await pending).value == stale

        reload = AsyncMock(return_value=Ok(fresh))
        result = await lookups.get(CacheKind.CUSTOMER, 1, reload, _decode_customer)

        assert result.value.email == "new@example.com"
        reload.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_claim_kinds_are_separate(self, lookups: LookupCache) -> None:
        """Claim ids are scoped by claim type."""
        home_key = CacheKeys.entity(CacheKind.for_claim(ClaimType.HOME), 7)
        assert home_key == "claim:home:7"
        assert CacheKeys.entity(CacheKind.AUTO_CLAIM, 7) == "claim:auto:7"
        assert CacheKeys.entity(CacheKind.POLICY, "POL-1") == "policy:number:POL-1"

        home = AsyncMock(return_value=Ok(None))
        auto = AsyncMock(return_value=Ok(None))
        await lookups.get(CacheKind.HOME_CLAIM, 7, home, _decode_customer)
        await lookups.get(CacheKind.AUTO_CLAIM, 7, auto, _decode_customer)

        home.assert_awaited_once()
        auto.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bookkeeping_does_not_grow_with_ids(
        self, lookups: LookupCache, sample_customer: Customer
    ) -> None:
        """Write tracking is released once no load is in flight."""
        for customer_id in range(1, 501):
            loader = AsyncMock(return_value=Ok(sample_customer))
            await lookups.get(CacheKind.CUSTOMER, customer_id, loader, _decode_customer)
            await lookups.invalidate(CacheKind.CUSTOMER, customer_id)

        assert lookups.tracked_keys == 0
        assert lookups._generations == {}

    @pytest.mark.asyncio
    async def test_tracking_released_after_failed_load(self, lookups: LookupCache) -> None:
        """A loader that raises still releases its key."""
        loader = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await lookups.get(CacheKind.CUSTOMER, 3, loader, _decode_customer)

        assert lookups.tracked_keys == 0


class TestLookupCacheBackendFailures:
    """Test lookups over an unreachable cache backend."""

    @pytest.mark.asyncio
    async def test_unreachable_backend_reads_through(
        self, mock_cache: MagicMock, sample_customer: Customer
    ) -> None:
        """Backend errors on read and store fall back to the remote answer."""
        mock_cache.get.side_effect = ConnectionError("redis down")
        mock_cache.set.side_effect = ConnectionError("redis down")
        lookups = LookupCache(mock_cache, ttl_seconds=60)
        loader = AsyncMock(return_value=Ok(sample_customer))

        result = await lookups.get(CacheKind.CUSTOMER, 1, loader, _decode_customer)

        assert result == Ok(sample_customer)
        loader.assert_awaited_once()
        mock_cache.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalidate_reports_backend_errors(self, mock_cache: MagicMock) -> None:
        """Callers learn that an entry could not be dropped."""
        mock_cache.delete.side_effect = ConnectionError("redis down")
        lookups = LookupCache(mock_cache, ttl_seconds=60)

        with pytest.raises(ConnectionError):
            await lookups.invalidate(CacheKind.CUSTOMER, 1)
