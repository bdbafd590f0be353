"""Read-only reference data: customers, policies and employees."""

from datetime import date
from enum import Enum

from beartype import beartype
from pydantic import Field

from .base import ApiModel


class PolicyStatus(str, Enum):
    """Lifecycle states of an insurance policy."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class SpecializationArea(str, Enum):
    """Claim family an adjuster is qualified for."""

    AUTO = "AUTO"
    HOME = "HOME"
    HEALTH = "HEALTH"


class EmploymentType(str, Enum):
    """Employment relationship of an employee."""

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"


@beartype
class Customer(ApiModel):
    """Policy holder."""

    id: int = Field(..., description="Customer identifier")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str | None = Field(None, description="Notification email address")


@beartype
class Policy(ApiModel):
    """Insurance policy, looked up by its business key."""

    id: int = Field(..., description="Policy identifier")
    policy_number: str = Field(..., description="Policy number (business key)")
    customer_id: int = Field(..., description="Owning customer")
    status: PolicyStatus | None = Field(None, description="Policy status")
    start_date: date | None = Field(None, description="Coverage start")
    end_date: date | None = Field(None, description="Coverage end")

    @beartype
    def is_valid_on(self, day: date) -> bool:
        """Active policies are valid until (excluding) their end date."""
        return (
            self.status == PolicyStatus.ACTIVE
            and self.end_date is not None
            and self.end_date > day
        )


@beartype
class Employee(ApiModel):
    """Employee record; adjusters are employees with a specialization."""

    id: int | None = Field(None, description="Employee identifier")
    first_name: str | None = Field(None, description="First name")
    last_name: str | None = Field(None, description="Last name")
    specialization_area: SpecializationArea | None = Field(
        None, description="Claim family the adjuster handles"
    )
    employment_type: EmploymentType | None = Field(None, description="Employment type")

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return " ".join(part for part in (self.first_name, self.last_name) if part)
