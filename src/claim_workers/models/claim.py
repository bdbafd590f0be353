"""Claim domain models.

AUTO, HOME and HEALTH claims share one shape; the claim type selects the
remote endpoint family and the concrete model class.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from beartype import beartype
from pydantic import Field

from .base import ApiModel


class ClaimType(str, Enum):
    """Enumeration of claim types."""

    AUTO = "AUTO"
    HOME = "HOME"
    HEALTH = "HEALTH"

    @classmethod
    @beartype
    def parse(cls, value: Any) -> "ClaimType":
        """Parse a claim type, ignoring case and surrounding whitespace."""
        if isinstance(value, ClaimType):
            return value
        if value is None or not str(value).strip():
            raise ValueError("Claim type cannot be null or empty")
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Invalid claim type: {value}. Supported types are: AUTO, HOME, HEALTH"
            ) from None

    @property
    def path(self) -> str:
        """URL path segment of the remote endpoint family."""
        return self.value.lower()

    @property
    def label(self) -> str:
        """Human-readable label used in log and error messages."""
        return self.value.capitalize()


class ClaimStatus(str, Enum):
    """Enumeration of claim processing states."""

    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"
    CLOSED = "CLOSED"


class DecisionType(str, Enum):
    """Outcome recorded by a claim decision."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@beartype
class ClaimDecision(ApiModel):
    """Approval or rejection outcome attached to a claim (one per claim)."""

    id: int | None = Field(None, description="Decision identifier")
    claim_id: int = Field(..., gt=0, description="Claim the decision belongs to")
    decision_type: DecisionType = Field(..., description="Decision outcome")
    decision_date: datetime | None = Field(None, description="When the decision was made")
    decision_maker_id: int | None = Field(None, description="Who made the decision")
    decision_maker_name: str | None = Field(None, description="Name of the decision maker")
    approved_amount: Decimal | None = Field(
        None, ge=Decimal("0"), description="Amount approved for payment"
    )
    reasoning: str | None = Field(None, description="Reasoning behind the decision")
    rejection_reason: str | None = Field(None, description="Reason for a rejection")
    additional_notes: str | None = Field(None, description="Free-form notes")
    updated_at: datetime | None = Field(None, description="Last modification time")


@beartype
class Claim(ApiModel):
    """Attributes shared by every claim variant."""

    CLAIM_TYPE: ClassVar[ClaimType]

    id: int | None = Field(None, description="Claim identifier")
    policy_id: int | None = Field(None, description="Policy the claim is filed under")
    claim_number: str | None = Field(None, description="Claim file number")
    description: str | None = Field(None, description="Incident description")
    date_of_incident: date | None = Field(None, description="Date the incident occurred")
    date_reported: date | None = Field(None, description="Date the claim was reported")
    estimated_amount: Decimal | None = Field(None, description="Estimated loss amount")
    status: ClaimStatus | None = Field(None, description="Current claim status")
    paid_amount: Decimal | None = Field(None, description="Amount paid out")
    assigned_adjuster_id: int | None = Field(None, description="Assigned adjuster")
    claim_decision: ClaimDecision | None = Field(None, description="Embedded decision")

    @property
    def claim_type(self) -> ClaimType:
        """Claim type of this variant."""
        return self.CLAIM_TYPE


@beartype
class AutoClaim(Claim):
    """Vehicle-related insurance claim."""

    CLAIM_TYPE: ClassVar[ClaimType] = ClaimType.AUTO

    license_plate: str | None = Field(None, description="Vehicle license plate")
    vehicle_vin: str | None = Field(None, description="Vehicle identification number")
    accident_location: str | None = Field(None, description="Where the accident happened")


@beartype
class HomeClaim(Claim):
    """Property/home insurance claim."""

    CLAIM_TYPE: ClassVar[ClaimType] = ClaimType.HOME

    property_address: str | None = Field(None, description="Address of the property")
    damage_type: str | None = Field(None, description="Kind of damage reported")


@beartype
class HealthClaim(Claim):
    """Medical/health insurance claim."""

    CLAIM_TYPE: ClassVar[ClaimType] = ClaimType.HEALTH

    medical_provider: str | None = Field(None, description="Treating provider")
    procedure_code: str | None = Field(None, description="Billed procedure code")


CLAIM_MODELS: dict[ClaimType, type[Claim]] = {
    ClaimType.AUTO: AutoClaim,
    ClaimType.HOME: HomeClaim,
    ClaimType.HEALTH: HealthClaim,
}


@beartype
def claim_model_for(claim_type: ClaimType) -> type[Claim]:
    """Return the concrete claim model of a claim type."""
    return CLAIM_MODELS[claim_type]
