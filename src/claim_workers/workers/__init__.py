# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""External task workers and the framework that runs them."""

from .adjuster import AdjusterAssignedNotificationWorker, AssignAdjusterWorker
from .base import BaseWorker, TaskExecutionError
from .claim_creation import ClaimCreationWorker
from .claim_rejection import (
    AdjusterDecisionRejectionWorker,
    ClaimRejectionWorker,
    InvalidPolicyRejectionWorker,
)
from .payment import (
    FullPaymentCalculationWorker,
    PartialPaymentCalculationWorker,
    PaymentCalculationWorker,
    PaymentExecutionWorker,
    calculate_payment,
)
from .policy_validation import PolicyValidationWorker
from .repair_approval import RepairApprovalWorker
from .runner import WorkerRunner
from .task_queue import FailureReport, InMemoryTaskQueue, TaskQueue
from .variables import ProcessVariables, Topics

__all__ = [
    # Framework
    "BaseWorker",
    "TaskExecutionError",
    "TaskQueue",
    "InMemoryTaskQueue",
    "FailureReport",
    "WorkerRunner",
    "ProcessVariables",
    "Topics",
    # Claim lifecycle workers
    "ClaimCreationWorker",
    "PolicyValidationWorker",
    "AssignAdjusterWorker",
    "AdjusterAssignedNotificationWorker",
    "RepairApprovalWorker",
    "ClaimRejectionWorker",
    "InvalidPolicyRejectionWorker",
    "AdjusterDecisionRejectionWorker",
    "PaymentCalculationWorker",
    "FullPaymentCalculationWorker",
    "PartialPaymentCalculationWorker",
    "PaymentExecutionWorker",
    "calculate_payment",
]
