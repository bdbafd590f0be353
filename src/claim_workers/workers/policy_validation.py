"""Policy validation worker."""

from typing import Any

from beartype import beartype

from ..core.result_types import Err
from ..models.task import ExternalTask, TaskVariables
from ..services.policy_service import PolicyService
from .base import BaseWorker, TaskExecutionError
from .variables import ProcessVariables, Topics


class PolicyValidationWorker(BaseWorker):
    """Publishes whether the claim's policy exists, is ACTIVE and has not ended."""

    topic_name = Topics.POLICY_VALIDATE

    def __init__(self, policy_service: PolicyService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._policies = policy_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        policy_number = variables.get_str(ProcessVariables.POLICY_NUMBER)
        if policy_number is None or not policy_number.strip():
            raise ValueError("Policy number cannot be null or empty")

        result = await self._policies.is_policy_valid(policy_number)
        if isinstance(result, Err):
            raise TaskExecutionError(result.error)

        self.logger.info("Policy %s valid: %s", policy_number.strip(), result.value)
        return {ProcessVariables.IS_POLICY_VALID: result.value}
