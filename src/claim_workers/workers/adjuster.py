"""Adjuster assignment and adjuster-assigned notification workers."""

from typing import Any

from beartype import beartype

from ..core.result_types import Err
from ..models.task import ExternalTask, TaskVariables
from ..services.adjuster_service import AdjusterService
from ..services.notification_service import NotificationService
from .base import BaseWorker, TaskExecutionError, require_claim_id, require_claim_type
from .variables import ProcessVariables, Topics

ADJUSTER_ASSIGNED_TEMPLATE = """\
Dear {first_name} {last_name},

We are writing to provide an important update regarding your claim (File #{file_number}).

We have successfully assigned an independent adjuster to your case to assess the reported damages and verify the details of the incident.

-------------------------------------------------------------
ASSIGNED ADJUSTER INFORMATION:
Name: {adjuster_name}
-------------------------------------------------------------

The adjuster will be contacting you shortly to schedule an inspection appointment or to request any additional documentation needed to complete the assessment report.

Please ensure you remain accessible via your registered contact phone number to avoid delays in the process.

Sincerely,
The Insurance Team
"""


class AssignAdjusterWorker(BaseWorker):
    """Assigns an available external adjuster to the claim."""

    topic_name = Topics.ASSIGN_ADJUSTER

    def __init__(self, adjuster_service: AdjusterService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._adjusters = adjuster_service

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        claim_id = require_claim_id(variables)
        claim_type = require_claim_type(variables)

        result = await self._adjusters.assign_adjuster(claim_type, claim_id)
        if isinstance(result, Err):
            self.logger.error("Adjuster assignment failed for claim %s: %s", claim_id, result.error)
            raise TaskExecutionError(f"Adjuster assignment failed for claim: {claim_id}")

        adjuster = result.value
        if adjuster.id is None:
            raise TaskExecutionError(f"Adjuster assignment failed for claim: {claim_id}")

        return {
            ProcessVariables.ADJUSTER_ID: adjuster.id,
            ProcessVariables.ADJUSTER_NAME: adjuster.full_name,
        }


class AdjusterAssignedNotificationWorker(BaseWorker):
    """Tells the customer which adjuster now handles their claim."""

    topic_name = Topics.ADJUSTER_ASSIGNED_NOTIFICATION

    def __init__(self, notification_service: NotificationService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._notifications = notification_service

    @staticmethod
    def _required(variables: TaskVariables, name: str, display_name: str) -> str:
        value = variables.get_str(name)
        if value is None or not value.strip():
            raise ValueError(f"{display_name} is required (process variable: '{name}')")
        return value.strip()

    @beartype
    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        first_name = self._required(
            variables, ProcessVariables.CUSTOMER_FIRSTNAME, "Customer first name"
        )
        last_name = self._required(
            variables, ProcessVariables.CUSTOMER_LASTNAME, "Customer last name"
        )
        file_number = self._required(
            variables, ProcessVariables.CLAIM_FILE_NUMBER, "Claim file number"
        )
        email = self._required(
            variables,
            ProcessVariables.CUSTOMER_NOTIFICATION_EMAIL,
            "Customer notification email",
        )
        adjuster_name = self._required(
            variables, ProcessVariables.ADJUSTER_NAME, "Adjuster name"
        )

        message = ADJUSTER_ASSIGNED_TEMPLATE.format(
            first_name=first_name,
            last_name=last_name,
            file_number=file_number,
            adjuster_name=adjuster_name,
        )
        try:
            sent = await self._notifications.send_notification_to_customer(email, message)
        except Exception as e:
            self.logger.error("Failed to send notification to %s: %s", email, e, exc_info=e)
            sent = False

        self.logger.info(
            "Adjuster assignment notification for claim %s sent: %s", file_number, sent
        )
        return {
            ProcessVariables.ADJUSTER_ASSIGNED_NOTIFICATION_SENT: sent,
            ProcessVariables.ADJUSTER_ASSIGNED_NOTIFICATION_MESSAGE: message,
        }
