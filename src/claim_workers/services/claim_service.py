"""Claim business logic service.

The service is the only writer of claims. Reads go through the lookup
cache; every successful write invalidates (or replaces) the cached claim,
including decision writes since the decision is embedded in the claim.
"""

from beartype import beartype

from ..clients.claims import ClaimsApiClient
from ..clients.directory import EmployeesApiClient
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.claim import Claim, ClaimDecision, ClaimType, claim_model_for
from ..models.party import Employee, EmploymentType, SpecializationArea
from .cache_keys import CacheKind
from .lookup_cache import LookupCache
from .performance_monitor import performance_monitor

logger = get_logger(__name__)


def _check_claim_id(claim_id: int) -> None:
    if claim_id <= 0:
        raise ValueError(f"Claim ID must be greater than zero, but was: {claim_id}")


class ClaimService:
    """Service for claim business logic."""

    def __init__(
        self,
        claims_client: ClaimsApiClient | None,
        employees_client: EmployeesApiClient | None,
        lookups: LookupCache,
    ) -> None:
        """Initialize claim service; a ``None`` client means the remote is unavailable."""
        if lookups is None or not hasattr(lookups, "get"):
            raise ValueError("Lookup cache required and must be available")

        self._claims = claims_client
        self._employees = employees_client
        self._lookups = lookups

    @beartype
    @performance_monitor("create_claim")
    async def create(self, claim_type: ClaimType, claim: Claim) -> Result[Claim, str]:
        """Create a new claim of ``claim_type``."""
        if claim.claim_type != claim_type:
            raise ValueError(
                f"Claim payload is a {claim.claim_type.value} claim, expected {claim_type.value}"
            )
        if self._claims is None:
            return Err("Claims service is not configured")

        try:
            created = await self._claims.create_claim(claim_type, claim)
        except Exception as e:
            logger.error("Failed to create %s claim: %s", claim_type.value, e)
            return Err(f"Failed to create claim of type: {claim_type.value}: {e}")

        if created is None:
            return Err(f"Failed to create claim of type: {claim_type.value}")

        if created.id is not None and created.id > 0:
            try:
                await self._lookups.put(CacheKind.for_claim(claim_type), created.id, created)
            except Exception as e:
                logger.warning(
                    "Failed to cache new %s claim %s: %s", claim_type.value, created.id, e
                )
        return Ok(created)

    @beartype
    @performance_monitor("get_claim")
    async def get_by_id(
        self, claim_type: ClaimType, claim_id: int
    ) -> Result[Claim | None, str]:
        """Get claim by type and ID; ``Ok(None)`` when it does not exist."""
        _check_claim_id(claim_id)
        if self._claims is None:
            logger.warning(
                "Claims service is not configured, %s claim %s treated as missing",
                claim_type.value,
                claim_id,
            )
            return Ok(None)

        async def load() -> Result[Claim | None, str]:
            try:
                return Ok(await self._claims.get_claim(claim_type, claim_id))
            except Exception as e:
                logger.error("Failed to fetch %s claim %s: %s", claim_type.value, claim_id, e)
                return Err(f"Failed to fetch {claim_type.label} claim with ID: {claim_id}: {e}")

        return await self._lookups.get(
            CacheKind.for_claim(claim_type),
            claim_id,
            load,
            claim_model_for(claim_type).model_validate,
        )

    @beartype
    @performance_monitor("update_claim")
    async def update(
        self, claim_type: ClaimType, claim_id: int, claim: Claim
    ) -> Result[Claim, str]:
        """Replace a claim and invalidate its cache entry."""
        _check_claim_id(claim_id)
        if self._claims is None:
            return Err("Claims service is not configured")

        try:
            updated = await self._claims.update_claim(claim_type, claim_id, claim)
        except Exception as e:
            logger.error("Failed to update %s claim %s: %s", claim_type.value, claim_id, e)
            return Err(f"Failed to update {claim_type.label} claim with ID: {claim_id}: {e}")

        if updated is None:
            return Err(f"{claim_type.label} claim not found with ID: {claim_id}")

        await self._forget(claim_type, claim_id)
        return Ok(updated)

    @beartype
    @performance_monitor("available_adjusters")
    async def available_adjusters(
        self, claim_type: ClaimType
    ) -> Result[list[Employee], str]:
        """Available EXTERNAL adjusters specialized in ``claim_type``."""
        if self._employees is None:
            return Err("Employees service is not configured")

        try:
            adjusters = await self._employees.get_available_adjusters(
                SpecializationArea(claim_type.value), EmploymentType.EXTERNAL
            )
        except Exception as e:
            logger.error("Failed to query %s adjusters: %s", claim_type.value, e)
            return Err(f"Failed to query available adjusters: {e}")
        return Ok(adjusters)

    @beartype
    @performance_monitor("assign_adjuster")
    async def assign_adjuster(
        self,
        claim_type: ClaimType,
        claim_id: int,
        adjuster_id: int | None = None,
    ) -> Result[Claim, str]:
        """Assign an adjuster to a claim.

        Without ``adjuster_id`` the first available EXTERNAL adjuster of the
        claim's specialization is chosen. No assignment is written when no
        adjuster is available.
        """
        _check_claim_id(claim_id)
        if adjuster_id is not None and adjuster_id <= 0:
            raise ValueError(f"Adjuster ID must be greater than zero, but was: {adjuster_id}")
        if self._claims is None:
            return Err("Claims service is not configured")

        if adjuster_id is None:
            adjusters_result = await self.available_adjusters(claim_type)
            if isinstance(adjusters_result, Err):
                return adjusters_result
            candidates = [a for a in adjusters_result.value if a.id is not None]
            if not candidates:
                return Err(
                    f"No available {claim_type.value} adjusters for claim: {claim_id}"
                )
            adjuster_id = candidates[0].id

        try:
            claim = await self._claims.assign_adjuster(claim_type, claim_id, adjuster_id)
        except Exception as e:
            logger.error("Adjuster assignment failed for claim %s: %s", claim_id, e)
            return Err(f"Adjuster assignment failed for claim: {claim_id}: {e}")

        if claim is None:
            return Err(f"{claim_type.label} claim not found with ID: {claim_id}")

        await self._forget(claim_type, claim_id)
        logger.info("Assigned adjuster %s to %s claim %s", adjuster_id, claim_type.value, claim_id)
        return Ok(claim)

    @beartype
    @performance_monitor("create_decision")
    async def create_decision(
        self, decision: ClaimDecision, claim_type: ClaimType
    ) -> Result[ClaimDecision, str]:
        """Persist a new decision for ``decision.claim_id``."""
        return await self._write_decision(decision, claim_type, create=True)

    @beartype
    @performance_monitor("update_decision")
    async def update_decision(
        self, decision: ClaimDecision, claim_type: ClaimType
    ) -> Result[ClaimDecision, str]:
        """Replace the decision of ``decision.claim_id``."""
        return await self._write_decision(decision, claim_type, create=False)

    async def _forget(self, claim_type: ClaimType, claim_id: int) -> None:
        """Drop the cached claim; the remote write already happened, so never raise."""
        try:
            await self._lookups.invalidate(CacheKind.for_claim(claim_type), claim_id)
        except Exception as e:
            logger.error(
                "Failed to invalidate cached %s claim %s, it may be stale until it expires: %s",
                claim_type.value,
                claim_id,
                e,
                exc_info=e,
            )

    async def _write_decision(
        self, decision: ClaimDecision, claim_type: ClaimType, *, create: bool
    ) -> Result[ClaimDecision, str]:
        claim_id = decision.claim_id
        _check_claim_id(claim_id)
        if self._claims is None:
            return Err("Claims service is not configured")

        action = "create" if create else "update"
        try:
            if create:
                saved = await self._claims.create_decision(claim_type, claim_id, decision)
            else:
                saved = await self._claims.update_decision(claim_type, claim_id, decision)
        except Exception as e:
            logger.error(
                "Failed to %s decision for %s claim %s: %s",
                action,
                claim_type.value,
                claim_id,
                e,
            )
            return Err(
                f"Failed to {action} decision for {claim_type.label} claim ID: {claim_id}: {e}"
            )

        if saved is None:
            return Err(f"{claim_type.label} claim not found with ID: {claim_id}")

        await self._forget(claim_type, claim_id)
        return Ok(saved)
