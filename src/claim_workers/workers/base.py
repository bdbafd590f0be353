"""Base class of the external task workers.

A worker owns one topic. :meth:`BaseWorker.handle` runs the business
logic of :meth:`BaseWorker.execute` for one locked task and reports the
outcome to the queue: completion with the returned variables, or a
failure describing the exception. Retrying is left to the queue.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, ClassVar

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..models.claim import ClaimType
from ..models.task import ExternalTask, TaskVariables
from .task_queue import TaskQueue
from .variables import ProcessVariables

logger = get_logger(__name__)


class TaskExecutionError(RuntimeError):
    """Business rule or lookup failure while executing a task."""


@beartype
def require_claim_id(variables: TaskVariables) -> int:
    """Positive ``claim_id`` variable."""
    claim_id = variables.get_int(ProcessVariables.CLAIM_ID)
    if claim_id is None:
        raise ValueError("Claim ID cannot be null")
    if claim_id <= 0:
        raise ValueError(f"Claim ID must be greater than zero, but was: {claim_id}")
    return claim_id


@beartype
def require_claim_type(variables: TaskVariables) -> ClaimType:
    """``claim_type`` variable, case and whitespace insensitive."""
    return ClaimType.parse(variables.get_str(ProcessVariables.CLAIM_TYPE))


@beartype
def require_positive_amount(variables: TaskVariables, name: str, label: str) -> Decimal:
    """Decimal variable that must be greater than zero."""
    amount = variables.get_decimal(name)
    if amount is None:
        raise ValueError(f"{label} cannot be null")
    if amount <= 0:
        raise ValueError(f"{label} must be greater than zero, but was: {amount}")
    return amount


class BaseWorker(ABC):
    """One external task topic and its business logic."""

    topic_name: ClassVar[str] = ""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the worker with the retry policy from ``settings``."""
        settings = settings or get_settings()
        self._default_retries = settings.task_retries
        self._retry_timeout_ms = settings.task_retry_timeout_ms
        self.logger = get_logger(f"{__name__}.{type(self).__name__}")

    @abstractmethod
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        """Run the business logic and return the variables to publish."""

    @beartype
    async def handle(self, task: ExternalTask, queue: TaskQueue) -> bool:
        """Execute ``task`` and complete or fail it; returns whether it completed."""
        self.logger.info(
            "Executing task %s on topic %s (process instance %s)",
            task.id,
            task.topic_name,
            task.process_instance_id,
        )
        try:
            output = await self.execute(task, task.variable_bag)
        except Exception as e:
            await self._report_failure(task, queue, e)
            return False

        await queue.complete(task, output)
        self.logger.info("Completed task %s with variables %s", task.id, sorted(output))
        return True

    async def _report_failure(
        self, task: ExternalTask, queue: TaskQueue, error: Exception
    ) -> None:
        retries = self.remaining_retries(task)
        message = str(error) or type(error).__name__
        if isinstance(error, ValueError):
            self.logger.warning("Task %s rejected: %s", task.id, message)
        else:
            self.logger.error("Task %s failed: %s", task.id, message, exc_info=error)
        await queue.fail(
            task,
            message,
            f"{type(error).__name__}: {message}",
            retries,
            self._retry_timeout_ms,
        )

    @beartype
    def remaining_retries(self, task: ExternalTask) -> int:
        """Retries left after this failure; the configured default on first failure."""
        if task.retries is None:
            return self._default_retries
        return max(task.retries - 1, 0)
