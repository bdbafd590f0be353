"""Client for the claims REST service."""

from beartype import beartype

from ..models.claim import Claim, ClaimDecision, ClaimType, claim_model_for
from .base import ApiClient


class ClaimsApiClient(ApiClient):
    """CRUD, adjuster assignment and decisions for AUTO/HOME/HEALTH claims."""

    service_name = "Claims API"

    @beartype
    async def create_claim(self, claim_type: ClaimType, claim: Claim) -> Claim | None:
        """POST /claims/{type}."""
        data = await self._request("POST", f"/claims/{claim_type.path}", json=claim.to_api())
        return self._parse(claim_model_for(claim_type), data)

    @beartype
    async def get_claim(self, claim_type: ClaimType, claim_id: int) -> Claim | None:
        """GET /claims/{type}/{id}."""
        data = await self._request("GET", f"/claims/{claim_type.path}/{claim_id}")
        return self._parse(claim_model_for(claim_type), data)

    @beartype
    async def update_claim(
        self, claim_type: ClaimType, claim_id: int, claim: Claim
    ) -> Claim | None:
        """PUT /claims/{type}/{id}."""
        data = await self._request(
            "PUT", f"/claims/{claim_type.path}/{claim_id}", json=claim.to_api()
        )
        return self._parse(claim_model_for(claim_type), data)

    @beartype
    async def assign_adjuster(
        self, claim_type: ClaimType, claim_id: int, adjuster_id: int
    ) -> Claim | None:
        """POST /claims/{type}/{id}/assign-adjuster."""
        data = await self._request(
            "POST",
            f"/claims/{claim_type.path}/{claim_id}/assign-adjuster",
            json={"adjusterId": adjuster_id},
        )
        return self._parse(claim_model_for(claim_type), data)

    @beartype
    async def create_decision(
        self, claim_type: ClaimType, claim_id: int, decision: ClaimDecision
    ) -> ClaimDecision | None:
        """POST /claims/{type}/{id}/decision."""
        data = await self._request(
            "POST", f"/claims/{claim_type.path}/{claim_id}/decision", json=decision.to_api()
        )
        return self._parse(ClaimDecision, data)

    @beartype
    async def update_decision(
        self, claim_type: ClaimType, claim_id: int, decision: ClaimDecision
    ) -> ClaimDecision | None:
        """PUT /claims/{type}/{id}/decision."""
        data = await self._request(
            "PUT", f"/claims/{claim_type.path}/{claim_id}/decision", json=decision.to_api()
        )
        return self._parse(ClaimDecision, data)
