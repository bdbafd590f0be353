"""Claim rejection workers.

Two variants reject a claim: one when the policy named by the claim is not
valid, one when the assigned adjuster decided against the claim. Both
validate their whole input up front, record a REJECTED decision, and then
notify the customer. A failed notification is reported through the output
variables and never fails the task.
"""

from abc import abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar

from beartype import beartype

from ..core.result_types import Err
from ..models.claim import ClaimDecision, DecisionType
from ..models.requests import (
    ClaimRejectionDecisionRequest,
    ClaimRejectionRequest,
    validate_request,
)
from ..models.task import ExternalTask, TaskVariables
from ..services.claim_service import ClaimService
from ..services.notification_service import NotificationService
from ..services.policy_service import PolicyService
from .base import BaseWorker, TaskExecutionError
from .variables import ProcessVariables, Topics

SYSTEM_DECISION_MAKER_ID = -1

INVALID_POLICY_TEMPLATE = """\
Dear {first_name} {last_name},

Unfortunately, we have to inform you that your recent claim with the reference number {file_number} has been rejected due to an invalid policy.

After careful review, we found that the policy number {policy_number} provided in your claim does not correspond to a valid policy in our system.

If you have any questions, please contact our customer support.

Best regards,
The Insurance Team
"""

ADJUSTER_DECISION_TEMPLATE = """\
Dear {first_name} {last_name},

We are writing to formally inform you regarding the status of your claim (File #{file_number}), filed under policy #{policy_number}.

After a thorough review and assessment by our claims adjustment team, we regret to inform you that we are unable to approve your claim request at this time.

Based on the adjuster's evaluation, the decision was made due to the following reason(s):

-------------------------------------------------------------
ADJUSTER'S ASSESSMENT NOTES:
"{decision_notes}"
-------------------------------------------------------------

If you believe this decision was made in error or if you have additional information that was not previously submitted, you have the right to appeal this decision. Please contact our Claims Department at +1-800-555-0199 referencing your claim file number.

Sincerely,
The Insurance Team
"""

_REQUEST_VARIABLES = {
    "claim_id": ProcessVariables.CLAIM_ID,
    "claim_file_number": ProcessVariables.CLAIM_FILE_NUMBER,
    "customer_first_name": ProcessVariables.CUSTOMER_FIRSTNAME,
    "customer_last_name": ProcessVariables.CUSTOMER_LASTNAME,
    "customer_notification_email": ProcessVariables.CUSTOMER_NOTIFICATION_EMAIL,
    "policy_number": ProcessVariables.POLICY_NUMBER,
    "claim_type": ProcessVariables.CLAIM_TYPE,
    "decision_notes": ProcessVariables.DECISION_NOTES,
    "adjuster_id": ProcessVariables.ADJUSTER_ID,
}


class ClaimRejectionWorker(BaseWorker):
    """Shared flow of the rejection variants."""

    request_model: ClassVar[type[ClaimRejectionRequest]] = ClaimRejectionRequest
    notification_template: ClassVar[str]
    decision_message: ClassVar[str]
    sent_variable: ClassVar[str]
    message_variable: ClassVar[str]

    def __init__(
        self,
        claim_service: ClaimService,
        notification_service: NotificationService,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._claims = claim_service
        self._notifications = notification_service

    def extract_request(self, variables: TaskVariables) -> ClaimRejectionRequest:
        """Validate every input of the request at once."""
        data = {
            field: variables.get(name)
            for field, name in _REQUEST_VARIABLES.items()
            if field in self.request_model.model_fields
        }
        return validate_request(self.request_model, data)

    @abstractmethod
    async def check_preconditions(self, request: ClaimRejectionRequest) -> None:
        """Raise when the claim must not be rejected by this variant."""

    @abstractmethod
    def build_decision(self, request: ClaimRejectionRequest) -> ClaimDecision:
        """REJECTED decision recorded for the claim."""

    @abstractmethod
    def format_message(self, request: ClaimRejectionRequest) -> str:
        """Customer notification text."""

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        request = self.extract_request(variables)
        self.logger.info(
            "Processing claim rejection for %s claim %s (policy %s)",
            request.claim_type.value,
            request.claim_id,
            request.policy_number,
        )

        try:
            await self.check_preconditions(request)

            decision_result = await self._claims.create_decision(
                self.build_decision(request), request.claim_type
            )
            if isinstance(decision_result, Err):
                raise TaskExecutionError(decision_result.error)

            message = self.format_message(request)
            sent = await self._send(request.customer_notification_email, message)
        except Exception as e:
            raise TaskExecutionError(
                f"Failed to process claim rejection for claim {request.claim_id}: {e}"
            ) from e

        self.logger.info(
            "Rejected claim %s (decision %s), notification sent: %s",
            request.claim_id,
            decision_result.value.id,
            sent,
        )
        return {self.sent_variable: sent, self.message_variable: message}

    async def _send(self, email: str, message: str) -> bool:
        try:
            return await self._notifications.send_notification_to_customer(email, message)
        except Exception as e:
            self.logger.error("Failed to send notification to %s: %s", email, e, exc_info=e)
            return False

    def _decision(
        self,
        request: ClaimRejectionRequest,
        maker_id: int,
        maker_name: str,
        rejection_reason: str,
    ) -> ClaimDecision:
        now = datetime.now(timezone.utc)
        return ClaimDecision(
            claim_id=request.claim_id,
            decision_type=DecisionType.REJECTED,
            decision_date=now,
            decision_maker_id=maker_id,
            decision_maker_name=maker_name,
            approved_amount=Decimal("0"),
            reasoning=self.decision_message,
            rejection_reason=rejection_reason,
            updated_at=now,
        )


class InvalidPolicyRejectionWorker(ClaimRejectionWorker):
    """Rejects a claim filed under an invalid policy."""

    topic_name = Topics.REJECT_INVALID_POLICY
    notification_template = INVALID_POLICY_TEMPLATE
    decision_message = "Claim has been rejected due to invalid policy"
    sent_variable = ProcessVariables.CLAIM_REJECTED_INVALID_POLICY_NOTIFICATION_SENT
    message_variable = ProcessVariables.CLAIM_REJECTED_INVALID_POLICY_NOTIFICATION_MESSAGE

    def __init__(
        self,
        claim_service: ClaimService,
        notification_service: NotificationService,
        policy_service: PolicyService,
        **kwargs: Any,
    ) -> None:
        super().__init__(claim_service, notification_service, **kwargs)
        self._policies = policy_service

    async def check_preconditions(self, request: ClaimRejectionRequest) -> None:
        policy_result = await self._policies.get_by_policy_number(request.policy_number)
        if isinstance(policy_result, Err) or policy_result.value is None:
            self.logger.warning("Policy not found for number: %s", request.policy_number)
            raise TaskExecutionError(f"Policy not found: {request.policy_number}")

    def build_decision(self, request: ClaimRejectionRequest) -> ClaimDecision:
        return self._decision(
            request, SYSTEM_DECISION_MAKER_ID, "SYSTEM", self.decision_message
        )

    def format_message(self, request: ClaimRejectionRequest) -> str:
        return self.notification_template.format(
            first_name=request.customer_first_name,
            last_name=request.customer_last_name,
            file_number=request.claim_file_number,
            policy_number=request.policy_number,
        )


class AdjusterDecisionRejectionWorker(ClaimRejectionWorker):
    """Rejects a claim after the adjuster's negative assessment."""

    topic_name = Topics.REJECT_BY_DECISION
    request_model = ClaimRejectionDecisionRequest
    notification_template = ADJUSTER_DECISION_TEMPLATE
    decision_message = "Claim rejected based on adjuster's assessment."
    sent_variable = ProcessVariables.CLAIM_REJECTED_ADJUSTER_DECISION_NOTIFICATION_SENT
    message_variable = ProcessVariables.CLAIM_REJECTED_ADJUSTER_DECISION_NOTIFICATION_MESSAGE

    async def check_preconditions(self, request: ClaimRejectionRequest) -> None:
        return None

    def build_decision(self, request: ClaimRejectionDecisionRequest) -> ClaimDecision:
        return self._decision(request, request.adjuster_id, "ADJUSTER", request.decision_notes)

    def format_message(self, request: ClaimRejectionDecisionRequest) -> str:
        return self.notification_template.format(
            first_name=request.customer_first_name,
            last_name=request.customer_last_name,
            file_number=request.claim_file_number,
            policy_number=request.policy_number,
            decision_notes=request.decision_notes,
        )
