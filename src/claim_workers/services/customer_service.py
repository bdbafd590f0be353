"""Customer lookups, cached by customer ID."""

from beartype import beartype

from ..clients.directory import CustomersApiClient
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.party import Customer
from .cache_keys import CacheKind
from .lookup_cache import LookupCache
from .performance_monitor import performance_monitor

logger = get_logger(__name__)


class CustomerService:
    """Service for customer lookups."""

    def __init__(
        self, customers_client: CustomersApiClient | None, lookups: LookupCache
    ) -> None:
        """Initialize customer service."""
        self._customers = customers_client
        self._lookups = lookups

    @beartype
    @performance_monitor("get_customer")
    async def get_by_id(self, customer_id: int) -> Result[Customer | None, str]:
        """Get customer by ID; ``Ok(None)`` when it does not exist."""
        if customer_id <= 0:
            raise ValueError(
                f"Customer ID must be greater than zero, but was: {customer_id}"
            )
        if self._customers is None:
            logger.warning(
                "Customers service is not configured, customer %s treated as missing",
                customer_id,
            )
            return Ok(None)

        async def load() -> Result[Customer | None, str]:
            try:
                return Ok(await self._customers.get_customer(customer_id))
            except Exception as e:
                logger.error("Failed to fetch customer %s: %s", customer_id, e)
                return Err(f"Failed to fetch customer with ID: {customer_id}: {e}")

        return await self._lookups.get(
            CacheKind.CUSTOMER, customer_id, load, Customer.model_validate
        )
