"""Test configuration and fixtures.

This module provides pytest fixtures for the claim workers: settings, cache
backends, mocked remote clients and services, and sample domain objects.
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fakeredis import aioredis

from claim_workers.clients.claims import ClaimsApiClient
from claim_workers.clients.directory import (
    CustomersApiClient,
    EmployeesApiClient,
    PoliciesApiClient,
)
from claim_workers.core.cache import CacheConfig, InMemoryCache, RedisCache
from claim_workers.core.config import Settings, clear_settings_cache
from claim_workers.models.claim import (
    ClaimDecision,
    ClaimStatus,
    DecisionType,
    HomeClaim,
)
from claim_workers.models.party import (
    Customer,
    Employee,
    EmploymentType,
    Policy,
    PolicyStatus,
    SpecializationArea,
)
from claim_workers.services.claim_service import ClaimService
from claim_workers.services.customer_service import CustomerService
from claim_workers.services.lookup_cache import LookupCache
from claim_workers.services.notification_service import NotificationService
from claim_workers.services.policy_service import PolicyService
from claim_workers.workers.task_queue import InMemoryTaskQueue


@pytest.fixture(autouse=True)
def _reset_settings() -> Any:
    """Never leak a cached Settings instance between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Settings tuned for fast tests."""
    return Settings(
        worker_id="test-worker",
        poll_interval_seconds=0.01,
        task_retries=3,
        task_retry_timeout_ms=0,
        worker_concurrency=2,
        max_tasks=5,
    )


@pytest.fixture
def memory_cache() -> InMemoryCache:
    """Empty in-process cache."""
    return InMemoryCache(CacheConfig(default_ttl=60, max_entries=100))


@pytest_asyncio.fixture  # type: ignore[misc]
async def redis_cache() -> AsyncGenerator[RedisCache, None]:
    """Redis cache backed by fakeredis."""
    client = aioredis.FakeRedis(decode_responses=True)
    cache = RedisCache(CacheConfig(default_ttl=60), redis_client=client)
    yield cache
    await client.flushall()
    await client.aclose()


@pytest.fixture
def lookups(memory_cache: InMemoryCache) -> LookupCache:
    """Lookup cache over the in-memory backend."""
    return LookupCache(memory_cache, ttl_seconds=60)


@pytest.fixture
def mock_cache() -> MagicMock:
    """Create mock cache for testing."""
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.delete = AsyncMock(return_value=True)
    return cache


@pytest.fixture
def claims_client() -> AsyncMock:
    """Mock claims REST client."""
    return AsyncMock(spec=ClaimsApiClient)


@pytest.fixture
def employees_client() -> AsyncMock:
    """Mock employee directory client."""
    return AsyncMock(spec=EmployeesApiClient)


@pytest.fixture
def customers_client() -> AsyncMock:
    """Mock customer directory client."""
    return AsyncMock(spec=CustomersApiClient)


@pytest.fixture
def policies_client() -> AsyncMock:
    """Mock policy directory client."""
    return AsyncMock(spec=PoliciesApiClient)


@pytest.fixture
def claim_service(
    claims_client: AsyncMock, employees_client: AsyncMock, lookups: LookupCache
) -> ClaimService:
    """Real claim service over mocked remote clients."""
    return ClaimService(claims_client, employees_client, lookups)


@pytest.fixture
def mock_claim_service() -> AsyncMock:
    """Mock claim service for worker tests."""
    return AsyncMock(spec=ClaimService)


@pytest.fixture
def mock_policy_service() -> AsyncMock:
    """Mock policy service for worker tests."""
    return AsyncMock(spec=PolicyService)


@pytest.fixture
def mock_customer_service() -> AsyncMock:
    """Mock customer service for worker tests."""
    return AsyncMock(spec=CustomerService)


@pytest.fixture
def mock_notification_service() -> AsyncMock:
    """Mock notification service that reports successful delivery."""
    service = AsyncMock(spec=NotificationService)
    service.send_notification_to_customer.return_value = True
    return service


@pytest.fixture
def queue() -> InMemoryTaskQueue:
    """Empty in-memory task queue."""
    return InMemoryTaskQueue(worker_id="test-worker")


@pytest.fixture
def sample_customer() -> Customer:
    """Sample policy holder."""
    return Customer(id=1, first_name="Jane", last_name="Doe", email="jane.doe@example.com")


@pytest.fixture
def sample_policy() -> Policy:
    """Active policy owned by the sample customer."""
    return Policy(
        id=10,
        policy_number="POL-2024-001",
        customer_id=1,
        status=PolicyStatus.ACTIVE,
        start_date=date(2024, 1, 1),
        end_date=date(2099, 12, 31),
    )


@pytest.fixture
def sample_decision() -> ClaimDecision:
    """Approval decision of the sample claim, before payment calculation."""
    return ClaimDecision(
        id=100,
        claim_id=7,
        decision_type=DecisionType.APPROVED,
        decision_date=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        decision_maker_id=55,
        decision_maker_name="ADJUSTER",
        reasoning="Damage confirmed",
    )


@pytest.fixture
def sample_claim(sample_decision: ClaimDecision) -> HomeClaim:
    """Home claim under review with an approval decision."""
    return HomeClaim(
        id=7,
        policy_id=10,
        claim_number="CLM-2024-0007",
        description="Water damage in kitchen",
        date_of_incident=date(2024, 2, 20),
        date_reported=date(2024, 2, 21),
        estimated_amount=Decimal("2500.00"),
        status=ClaimStatus.IN_REVIEW,
        claim_decision=sample_decision,
    )


@pytest.fixture
def sample_adjuster() -> Employee:
    """External home adjuster."""
    return Employee(
        id=55,
        first_name="Sam",
        last_name="Carter",
        specialization_area=SpecializationArea.HOME,
        employment_type=EmploymentType.EXTERNAL,
    )
