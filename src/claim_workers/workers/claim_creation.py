"""Claim creation worker."""

from datetime import date
from typing import Any

from beartype import beartype

from ..core.result_types import Err
from ..models.claim import ClaimStatus, claim_model_for
from ..models.task import ExternalTask, TaskVariables
from ..services.claim_service import ClaimService
from ..services.customer_service import CustomerService
from ..services.policy_service import PolicyService
from .base import BaseWorker, TaskExecutionError, require_claim_type, require_positive_amount
from .variables import ProcessVariables, Topics


class ClaimCreationWorker(BaseWorker):
    """Files a SUBMITTED claim under the policy named by the process."""

    topic_name = Topics.CREATE_CLAIM

    def __init__(
        self,
        claim_service: ClaimService,
        policy_service: PolicyService,
        customer_service: CustomerService,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._claims = claim_service
        self._policies = policy_service
        self._customers = customer_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        claim_type = require_claim_type(variables)
        policy_number = variables.get_str(ProcessVariables.POLICY_NUMBER)
        if policy_number is None or not policy_number.strip():
            raise ValueError("Policy number cannot be null or empty")
        policy_number = policy_number.strip()

        description = variables.get_str(ProcessVariables.INCIDENT_DESCRIPTION)
        if description is None or not description.strip():
            raise ValueError("Incident description cannot be null or empty")
        incident_date = variables.get_date(ProcessVariables.INCIDENT_DATE)
        if incident_date is None:
            raise ValueError("Incident date cannot be null")
        estimated_loss = require_positive_amount(
            variables, ProcessVariables.INCIDENT_ESTIMATED_LOSS_AMOUNT, "Estimated loss amount"
        )

        self.logger.info(
            "Creating %s claim for policy %s (task %s)",
            claim_type.value,
            policy_number,
            task.id,
        )

        policy_result = await self._policies.get_by_policy_number(policy_number)
        if isinstance(policy_result, Err) or policy_result.value is None:
            raise TaskExecutionError(f"Policy not found for policy number: {policy_number}")
        policy = policy_result.value

        customer_result = await self._customers.get_by_id(policy.customer_id)
        if isinstance(customer_result, Err) or customer_result.value is None:
            raise TaskExecutionError(
                f"Customer not found for customer ID: {policy.customer_id}"
            )
        customer = customer_result.value

        claim = claim_model_for(claim_type)(
            policy_id=policy.id,
            description=description.strip(),
            date_of_incident=incident_date,
            date_reported=date.today(),
            estimated_amount=estimated_loss,
            status=ClaimStatus.SUBMITTED,
        )
        created_result = await self._claims.create(claim_type, claim)
        if isinstance(created_result, Err):
            raise TaskExecutionError(created_result.error)
        created = created_result.value

        claim_number = created.claim_number
        if not claim_number:
            self.logger.warning("Created claim has no claim number, using claim ID as fallback")
            claim_number = f"CLAIM-{created.id}"

        self.logger.info(
            "Created claim %s (%s) for policy %s", created.id, claim_number, policy_number
        )
        return {
            ProcessVariables.CUSTOMER_FIRSTNAME: customer.first_name,
            ProcessVariables.CUSTOMER_LASTNAME: customer.last_name,
            ProcessVariables.CUSTOMER_NOTIFICATION_EMAIL: customer.email,
            ProcessVariables.CLAIM_ID: created.id,
            ProcessVariables.CLAIM_TYPE: claim_type.value,
            ProcessVariables.CLAIM_FILE_NUMBER: claim_number,
        }
