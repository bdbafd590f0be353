"""Validated inputs of the claim rejection workers.

Every constraint of a request is evaluated before any side effect, and all
violations are reported together in a single error message.
"""

from typing import Any, TypeVar

from beartype import beartype
from pydantic import EmailStr, Field, ValidationError, field_validator

from .base import BaseModelConfig
from .claim import ClaimType

RequestT = TypeVar("RequestT", bound=BaseModelConfig)


@beartype
class ClaimRejectionRequest(BaseModelConfig):
    """Context needed to reject a claim and notify the customer."""

    claim_id: int = Field(..., gt=0, title="Claim ID")
    claim_file_number: str = Field(..., min_length=1, title="Claim file number")
    customer_first_name: str = Field(..., min_length=1, title="Customer first name")
    customer_last_name: str = Field(..., min_length=1, title="Customer last name")
    customer_notification_email: EmailStr = Field(
        ..., title="Customer notification email"
    )
    policy_number: str = Field(..., min_length=1, title="Policy number")
    claim_type: ClaimType = Field(..., title="Claim type")

    @field_validator("claim_type", mode="before")
    @classmethod
    def parse_claim_type(cls, v: Any) -> ClaimType:
        """Accept claim types in any case and with surrounding whitespace."""
        return ClaimType.parse(v)


@beartype
class ClaimRejectionDecisionRequest(ClaimRejectionRequest):
    """Rejection context when an adjuster decided against the claim."""

    decision_notes: str = Field(..., min_length=1, title="Decision notes")
    adjuster_id: int = Field(..., gt=0, title="Adjuster ID")


def _describe(model: type[BaseModelConfig], error: Any) -> str:
    name = str(error["loc"][0]) if error["loc"] else "request"
    field_info = model.model_fields.get(name)
    title = field_info.title if field_info and field_info.title else name
    value = error.get("input")

    if value is None or (isinstance(value, str) and not value.strip()):
        if field_info is not None and field_info.annotation is int:
            return f"{title} cannot be null"
        return f"{title} cannot be blank"
    if error["type"] == "greater_than":
        return f"{title} must be positive"
    if name == "customer_notification_email":
        return f"{title} must be a valid email address"
    cause = error.get("ctx", {}).get("error")
    return f"{title}: {cause or error['msg']}"


@beartype
def validate_request(model: type[RequestT], data: dict[str, Any]) -> RequestT:
    """Build ``model`` from ``data`` or raise one ValueError naming every violation."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        violations = "; ".join(_describe(model, error) for error in exc.errors())
        raise ValueError(f"Validation failed: {violations}") from None
