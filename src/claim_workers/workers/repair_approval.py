"""Repair approval worker."""

from typing import Any

from beartype import beartype

from ..core.result_types import Err
from ..models.claim import ClaimStatus
from ..models.task import ExternalTask, TaskVariables
from ..services.claim_service import ClaimService
from .base import BaseWorker, TaskExecutionError, require_claim_id, require_claim_type
from .variables import ProcessVariables, Topics


class RepairApprovalWorker(BaseWorker):
    """Moves a claim to APPROVED once its repair is approved."""

    topic_name = Topics.REPAIR_APPROVE

    def __init__(self, claim_service: ClaimService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._claims = claim_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        claim_id = require_claim_id(variables)
        claim_type = require_claim_type(variables)
        failure = f"Failed to approve repair for claim ID: {claim_id} of type: {claim_type.value}"

        claim_result = await self._claims.get_by_id(claim_type, claim_id)
        if isinstance(claim_result, Err) or claim_result.value is None:
            raise TaskExecutionError(failure)

        approved = claim_result.value.model_copy(update={"status": ClaimStatus.APPROVED})
        update_result = await self._claims.update(claim_type, claim_id, approved)
        if isinstance(update_result, Err):
            self.logger.error("%s: %s", failure, update_result.error)
            raise TaskExecutionError(failure)

        self.logger.info("Approved repair for %s claim %s", claim_type.value, claim_id)
        return {
            ProcessVariables.REPAIR_APPROVAL_COMPLETED: True,
            ProcessVariables.REPAIR_APPROVAL_STATUS: ClaimStatus.APPROVED.value,
        }
