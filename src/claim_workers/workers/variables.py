"""Process variable names shared with the workflow definition."""

from typing import Final


class ProcessVariables:
    """Names of the process variables read and written by the workers."""

    # Claim
    CLAIM_ID: Final = "claim_id"
    CLAIM_FILE_NUMBER: Final = "claim_file_number"
    CLAIM_TYPE: Final = "claim_type"
    POLICY_NUMBER: Final = "policy_number"
    IS_POLICY_VALID: Final = "is_policy_valid"

    # Customer
    CUSTOMER_FIRSTNAME: Final = "customer_firstname"
    CUSTOMER_LASTNAME: Final = "customer_lastname"
    CUSTOMER_NOTIFICATION_EMAIL: Final = "customer_notification_email"

    # Incident
    INCIDENT_DESCRIPTION: Final = "incident_description"
    INCIDENT_DATE: Final = "incident_date"
    INCIDENT_ESTIMATED_LOSS_AMOUNT: Final = "incident_estimated_loss_amount"

    # Adjuster
    ADJUSTER_ID: Final = "adjuster_id"
    ADJUSTER_NAME: Final = "adjuster_name"
    DECISION_NOTES: Final = "decision_notes"

    # Payment
    INVOICE_AMOUNT: Final = "invoice_amount"
    INVOICE_DETAILS: Final = "invoice_details"
    APPROVED_AMOUNT: Final = "approved_amount"
    PAYMENT_EXECUTED: Final = "payment_executed"
    PAID_AMOUNT: Final = "paid_amount"
    PAYMENT_STATUS: Final = "payment_status"

    # Repair approval
    REPAIR_APPROVAL_COMPLETED: Final = "repair_approval_completed"
    REPAIR_APPROVAL_STATUS: Final = "repair_approval_status"

    # Notifications
    CLAIM_REJECTED_INVALID_POLICY_NOTIFICATION_SENT: Final = (
        "claim_rejected_invalid_policy_notification_sent_successfully"
    )
    CLAIM_REJECTED_INVALID_POLICY_NOTIFICATION_MESSAGE: Final = (
        "claim_rejected_invalid_policy_notification_message"
    )
    CLAIM_REJECTED_ADJUSTER_DECISION_NOTIFICATION_SENT: Final = (
        "claim_rejected_adjuster_decision_notification_sent_successfully"
    )
    CLAIM_REJECTED_ADJUSTER_DECISION_NOTIFICATION_MESSAGE: Final = (
        "claim_rejected_adjuster_decision_notification_message"
    )
    ADJUSTER_ASSIGNED_NOTIFICATION_SENT: Final = (
        "adjuster_assigned_notification_sent_successfully"
    )
    ADJUSTER_ASSIGNED_NOTIFICATION_MESSAGE: Final = (
        "adjuster_assigned_notification_message"
    )


class Topics:
    """External task topics, one per worker."""

    CREATE_CLAIM: Final = "insurance.claim.create-claim"
    POLICY_VALIDATE: Final = "insurance.claim.policy-validate"
    ASSIGN_ADJUSTER: Final = "insurance.claim.assign-adjuster"
    ADJUSTER_ASSIGNED_NOTIFICATION: Final = "insurance.claim.notification.adjuster-assigned"
    REPAIR_APPROVE: Final = "insurance.claim.repair-approve"
    REJECT_INVALID_POLICY: Final = "insurance.claim.reject-invalid-policy"
    REJECT_BY_DECISION: Final = "insurance.claim.reject-by-decision"
    CALCULATE_FULL_PAYMENT: Final = "insurance.payment.calculate-full"
    CALCULATE_PARTIAL_PAYMENT: Final = "insurance.payment.calculate-partial"
    EXECUTE_PAYMENT: Final = "insurance.payment.execute"
