"""Policy lookups by policy number and policy validity checks."""

from datetime import date

from beartype import beartype

from ..clients.directory import PoliciesApiClient
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.party import Policy
from .cache_keys import CacheKind
from .lookup_cache import LookupCache
from .performance_monitor import performance_monitor

logger = get_logger(__name__)


def _check_policy_number(policy_number: str) -> str:
    if not policy_number.strip():
        raise ValueError("Policy number cannot be null or empty")
    return policy_number.strip()


class PolicyService:
    """Service for policy lookups."""

    def __init__(
        self, policies_client: PoliciesApiClient | None, lookups: LookupCache
    ) -> None:
        """Initialize policy service."""
        self._policies = policies_client
        self._lookups = lookups

    @beartype
    @performance_monitor("get_policy")
    async def get_by_policy_number(self, policy_number: str) -> Result[Policy | None, str]:
        """Get policy by its number; ``Ok(None)`` when it does not exist."""
        number = _check_policy_number(policy_number)
        if self._policies is None:
            logger.warning(
                "Policies service is not configured, policy %s treated as missing",
                number,
            )
            return Ok(None)

        async def load() -> Result[Policy | None, str]:
            try:
                return Ok(await self._policies.get_policy_by_number(number))
            except Exception as e:
                logger.error("Failed to fetch policy %s: %s", number, e)
                return Err(f"Failed to fetch policy {number}: {e}")

        return await self._lookups.get(CacheKind.POLICY, number, load, Policy.model_validate)

    @beartype
    async def is_policy_valid(
        self, policy_number: str, today: date | None = None
    ) -> Result[bool, str]:
        """A policy is valid when it exists, is ACTIVE and has not ended."""
        number = _check_policy_number(policy_number)
        day = today or date.today()

        return await self._lookups.get(
            CacheKind.POLICY_VALIDITY,
            f"{number}:{day.isoformat()}",
            lambda: self._compute_validity(number, day),
            bool,
        )

    async def _compute_validity(self, number: str, day: date) -> Result[bool, str]:
        policy_result = await self.get_by_policy_number(number)
        if isinstance(policy_result, Err):
            return policy_result

        policy = policy_result.value
        if policy is None:
            logger.warning("Policy %s not found, treated as invalid", number)
            return Ok(False)
        return Ok(policy.is_valid_on(day))
