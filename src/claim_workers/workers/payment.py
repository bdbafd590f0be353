"""Payment calculation and payment execution workers.

The approved amount is a fixed percentage of the invoice amount, rounded
half-up to cents: 100% for a full payment and 80% for a partial one.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, ClassVar

from beartype import beartype

from ..core.result_types import Err
from ..models.claim import ClaimStatus
from ..models.task import ExternalTask, TaskVariables
from ..services.claim_service import ClaimService
from .base import (
    BaseWorker,
    TaskExecutionError,
    require_claim_id,
    require_claim_type,
    require_positive_amount,
)
from .variables import ProcessVariables, Topics

CENTS = Decimal("0.01")


@beartype
def calculate_payment(invoice_amount: Decimal, percentage: int) -> Decimal:
    """``percentage`` percent of ``invoice_amount``, rounded half-up to cents."""
    return (invoice_amount * percentage / Decimal(100)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )


class PaymentCalculationWorker(BaseWorker):
    """Stores the approved amount on the claim's existing decision."""

    payment_percentage: ClassVar[int]

    def __init__(self, claim_service: ClaimService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._claims = claim_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        invoice_amount = require_positive_amount(
            variables, ProcessVariables.INVOICE_AMOUNT, "Invoice amount"
        )
        claim_id = require_claim_id(variables)
        claim_type = require_claim_type(variables)

        approved_amount = calculate_payment(invoice_amount, self.payment_percentage)
        self.logger.info(
            "Calculated approved amount %s (%d%% of %s) for %s claim %s",
            approved_amount,
            self.payment_percentage,
            invoice_amount,
            claim_type.value,
            claim_id,
        )

        claim_result = await self._claims.get_by_id(claim_type, claim_id)
        if isinstance(claim_result, Err) or claim_result.value is None:
            raise TaskExecutionError(f"{claim_type.label} claim not found with ID: {claim_id}")

        decision = claim_result.value.claim_decision
        if decision is None:
            raise TaskExecutionError(
                f"Claim decision not found for {claim_type.path} claim ID: {claim_id}"
            )

        updated = decision.model_copy(
            update={
                "approved_amount": approved_amount,
                "additional_notes": variables.get_str(ProcessVariables.INVOICE_DETAILS),
                "updated_at": datetime.now(timezone.utc),
            }
        )
        update_result = await self._claims.update_decision(updated, claim_type)
        if isinstance(update_result, Err):
            raise TaskExecutionError(
                f"Failed to update claim decision for {claim_type.path} claim ID: "
                f"{claim_id}: {update_result.error}"
            )

        return {ProcessVariables.APPROVED_AMOUNT: approved_amount}


class FullPaymentCalculationWorker(PaymentCalculationWorker):
    """Approves the whole invoice amount."""

    topic_name = Topics.CALCULATE_FULL_PAYMENT
    payment_percentage = 100


class PartialPaymentCalculationWorker(PaymentCalculationWorker):
    """Approves 80% of the invoice amount."""

    topic_name = Topics.CALCULATE_PARTIAL_PAYMENT
    payment_percentage = 80


class PaymentExecutionWorker(BaseWorker):
    """Pays the approved amount and marks the claim PAID."""

    topic_name = Topics.EXECUTE_PAYMENT

    def __init__(self, claim_service: ClaimService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._claims = claim_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        claim_id = require_claim_id(variables)
        claim_type = require_claim_type(variables)
        approved_amount = require_positive_amount(
            variables, ProcessVariables.APPROVED_AMOUNT, "Approved amount"
        )

        claim_result = await self._claims.get_by_id(claim_type, claim_id)
        if isinstance(claim_result, Err) or claim_result.value is None:
            raise TaskExecutionError(f"{claim_type.label} claim not found with ID: {claim_id}")

        paid = claim_result.value.model_copy(
            update={"paid_amount": approved_amount, "status": ClaimStatus.PAID}
        )
        update_result = await self._claims.update(claim_type, claim_id, paid)
        if isinstance(update_result, Err):
            self.logger.error("Payment update failed: %s", update_result.error)
            raise TaskExecutionError(
                f"Failed to update {claim_type.path} claim payment for ID: {claim_id}"
            )

        self.logger.info(
            "Paid %s for %s claim %s", approved_amount, claim_type.value, claim_id
        )
        return {
            ProcessVariables.PAYMENT_EXECUTED: True,
            ProcessVariables.PAID_AMOUNT: approved_amount,
            ProcessVariables.PAYMENT_STATUS: "COMPLETED",
        }
