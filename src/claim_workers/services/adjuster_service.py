"""Adjuster assignment: choose an available external adjuster for a claim."""

from collections.abc import Callable, Sequence

from beartype import beartype

from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.claim import ClaimType
from ..models.party import Employee
from .claim_service import ClaimService

logger = get_logger(__name__)

AdjusterSelector = Callable[[Sequence[Employee]], Employee]


def first_available(adjusters: Sequence[Employee]) -> Employee:
    """Default selection policy: first adjuster in directory order."""
    return adjusters[0]


class AdjusterService:
    """Selects an adjuster and delegates the assignment write to the claim service."""

    def __init__(
        self,
        claim_service: ClaimService,
        selector: AdjusterSelector = first_available,
    ) -> None:
        """Initialize with the claim service and an adjuster selection policy."""
        self._claims = claim_service
        self._select = selector

    @beartype
    async def assign_adjuster(
        self, claim_type: ClaimType, claim_id: int
    ) -> Result[Employee, str]:
        """Assign an available EXTERNAL adjuster to the claim and return them."""
        if claim_id <= 0:
            raise ValueError("Claim ID cannot be null or negative")

        adjusters_result = await self._claims.available_adjusters(claim_type)
        if isinstance(adjusters_result, Err):
            return adjusters_result

        candidates = [a for a in adjusters_result.value if a.id is not None]
        if not candidates:
            logger.warning(
                "No available %s adjusters for claim %s", claim_type.value, claim_id
            )
            return Err(f"No available {claim_type.value} adjusters for claim: {claim_id}")

        adjuster = self._select(candidates)
        assignment = await self._claims.assign_adjuster(claim_type, claim_id, adjuster.id)
        if isinstance(assignment, Err):
            return assignment

        logger.info(
            "Adjuster %s (%s) assigned to %s claim %s",
            adjuster.id,
            adjuster.full_name,
            claim_type.value,
            claim_id,
        )
        return Ok(adjuster)
