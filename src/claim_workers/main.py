"""Claim Workers - Main Application Module."""

import asyncio
import logging
import signal
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from attrs import frozen
from beartype import beartype

from .clients.base import ApiClient
from .clients.camunda import CamundaTaskQueue
from .clients.claims import ClaimsApiClient
from .clients.directory import CustomersApiClient, EmployeesApiClient, PoliciesApiClient
from .clients.notification import NotificationClient
from .core.cache import Cache, create_cache
from .core.config import Settings, get_settings
from .core.logging_utils import configure_logging, get_logger
from .services.adjuster_service import AdjusterService
from .services.claim_service import ClaimService
from .services.customer_service import CustomerService
from .services.lookup_cache import LookupCache
from .services.notification_service import NotificationService
from .services.policy_service import PolicyService
from .workers.adjuster import AdjusterAssignedNotificationWorker, AssignAdjusterWorker
from .workers.base import BaseWorker
from .workers.claim_creation import ClaimCreationWorker
from .workers.claim_rejection import (
    AdjusterDecisionRejectionWorker,
    InvalidPolicyRejectionWorker,
)
from .workers.payment import (
    FullPaymentCalculationWorker,
    PartialPaymentCalculationWorker,
    PaymentExecutionWorker,
)
from .workers.policy_validation import PolicyValidationWorker
from .workers.repair_approval import RepairApprovalWorker
from .workers.runner import WorkerRunner
from .workers.task_queue import TaskQueue

logger = get_logger(__name__)


@frozen
class Services:
    """Service layer shared by the workers."""

    claims: ClaimService
    adjusters: AdjusterService
    customers: CustomerService
    policies: PolicyService
    notifications: NotificationService


def _client(client_type: type[ApiClient], url: str | None, settings: Settings) -> ApiClient | None:
    if url is None:
        logger.warning("%s URL not configured, running degraded", client_type.service_name)
        return None
    return client_type.from_url(url, settings.api_timeout_seconds)


@beartype
def build_workers(services: Services, settings: Settings) -> list[BaseWorker]:
    """Instantiate every claim lifecycle worker."""
    return [
        ClaimCreationWorker(
            services.claims, services.policies, services.customers, settings=settings
        ),
        PolicyValidationWorker(services.policies, settings=settings),
        AssignAdjusterWorker(services.adjusters, settings=settings),
        AdjusterAssignedNotificationWorker(services.notifications, settings=settings),
        RepairApprovalWorker(services.claims, settings=settings),
        InvalidPolicyRejectionWorker(
            services.claims, services.notifications, services.policies, settings=settings
        ),
        AdjusterDecisionRejectionWorker(
            services.claims, services.notifications, settings=settings
        ),
        FullPaymentCalculationWorker(services.claims, settings=settings),
        PartialPaymentCalculationWorker(services.claims, settings=settings),
        PaymentExecutionWorker(services.claims, settings=settings),
    ]


@asynccontextmanager
async def worker_application(
    settings: Settings | None = None,
    queue: TaskQueue | None = None,
    cache: Cache | None = None,
) -> AsyncGenerator[WorkerRunner, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = settings or get_settings()
    logger.info("Starting claim workers %s in %s mode", settings.worker_id, settings.app_env)

    cache = cache or create_cache(settings)
    await cache.connect()
    if not await cache.health_check():
        logger.warning(
            "%s is not answering, lookups go to the remote services", type(cache).__name__
        )
    lookups = LookupCache(cache, settings.cache_ttl_seconds)

    clients: list[ApiClient] = []

    def register(client: ApiClient | None) -> ApiClient | None:
        if client is not None:
            clients.append(client)
        return client

    claims_client = register(_client(ClaimsApiClient, settings.claims_api_url, settings))
    employees_client = register(
        _client(EmployeesApiClient, settings.employees_api_url, settings)
    )
    customers_client = register(
        _client(CustomersApiClient, settings.customers_api_url, settings)
    )
    policies_client = register(_client(PoliciesApiClient, settings.policies_api_url, settings))
    notification_client = register(
        _client(NotificationClient, settings.notification_webhook_url, settings)
    )
    if queue is None:
        queue = CamundaTaskQueue.from_settings(settings)
        clients.append(queue)

    claim_service = ClaimService(claims_client, employees_client, lookups)
    services = Services(
        claims=claim_service,
        adjusters=AdjusterService(claim_service),
        customers=CustomerService(customers_client, lookups),
        policies=PolicyService(policies_client, lookups),
        notifications=NotificationService(notification_client),
    )
    runner = WorkerRunner(queue, build_workers(services, settings), settings)

    try:
        yield runner
    finally:
        logger.info("Shutting down claim workers")
        for client in clients:
            await client.aclose()
        await cache.disconnect()


async def serve(settings: Settings | None = None) -> None:
    """Run the workers until SIGINT or SIGTERM."""
    async with worker_application(settings) as runner:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, runner.stop)
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                signal.signal(sig, lambda *_: loop.call_soon_threadsafe(runner.stop))
        await runner.run()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()
    configure_logging(level=settings.log_level)
    logging.getLogger().setLevel(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
