"""Domain models package for the claim workers.

This package exports the Pydantic models exchanged with the remote
insurance services and the external task queue.
"""

from .base import ApiModel, BaseModelConfig
from .claim import (
    CLAIM_MODELS,
    AutoClaim,
    Claim,
    ClaimDecision,
    ClaimStatus,
    ClaimType,
    DecisionType,
    HealthClaim,
    HomeClaim,
    claim_model_for,
)
from .party import (
    Customer,
    Employee,
    EmploymentType,
    Policy,
    PolicyStatus,
    SpecializationArea,
)
from .requests import (
    ClaimRejectionDecisionRequest,
    ClaimRejectionRequest,
    validate_request,
)
from .task import ExternalTask, TaskVariableError, TaskVariables

__all__ = [
    # Base models
    "ApiModel",
    "BaseModelConfig",
    # Claim models
    "Claim",
    "AutoClaim",
    "HomeClaim",
    "HealthClaim",
    "ClaimDecision",
    "ClaimType",
    "ClaimStatus",
    "DecisionType",
    "CLAIM_MODELS",
    "claim_model_for",
    # Reference data
    "Customer",
    "Policy",
    "PolicyStatus",
    "Employee",
    "EmploymentType",
    "SpecializationArea",
    # Requests
    "ClaimRejectionRequest",
    "ClaimRejectionDecisionRequest",
    "validate_request",
    # Tasks
    "ExternalTask",
    "TaskVariables",
    "TaskVariableError",
]
