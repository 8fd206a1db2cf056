"""
Notification taxonomy: severities, statuses, error types and operation tables.

Everything here is plain data shared by the classifier (client side), the
triage presenter and the Django models (server side).
"""

from django.db import models


class NotificationSeverity(models.TextChoices):
    """Ordered urgency of a notification (low < medium < high < critical)."""

    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"

    @property
    def rank(self) -> int:
        return SEVERITY_ORDER.index(self.value)


SEVERITY_ORDER = [
    NotificationSeverity.LOW.value,
    NotificationSeverity.MEDIUM.value,
    NotificationSeverity.HIGH.value,
    NotificationSeverity.CRITICAL.value,
]


class NotificationStatus(models.TextChoices):
    """Triage status of a notification."""

    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    RESOLVED = "resolved", "Resolved"
    DISMISSED = "dismissed", "Dismissed"


# Allowed status transitions; resolved and dismissed are terminal.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    NotificationStatus.PENDING.value: frozenset(
        {
            NotificationStatus.IN_PROGRESS.value,
            NotificationStatus.RESOLVED.value,
            NotificationStatus.DISMISSED.value,
        }
    ),
    NotificationStatus.IN_PROGRESS.value: frozenset(
        {NotificationStatus.RESOLVED.value, NotificationStatus.DISMISSED.value}
    ),
    NotificationStatus.RESOLVED.value: frozenset(),
    NotificationStatus.DISMISSED.value: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if a notification in `current` status may move to `target`."""
    return target in STATUS_TRANSITIONS.get(current, frozenset())


def is_terminal(status: str) -> bool:
    return not STATUS_TRANSITIONS.get(status)


class ErrorType(models.TextChoices):
    """Closed set of error categories used for classification."""

    NETWORK_ERROR = "NETWORK_ERROR", "Network error"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR", "Authentication error"
    PERMISSION_ERROR = "PERMISSION_ERROR", "Permission error"
    VALIDATION_ERROR = "VALIDATION_ERROR", "Validation error"
    TIMEOUT_ERROR = "TIMEOUT_ERROR", "Timeout error"
    FILE_ERROR = "FILE_ERROR", "File error"
    DATA_ERROR = "DATA_ERROR", "Data error"
    API_ERROR = "API_ERROR", "API error"
    UNKNOWN_ERROR = "UNKNOWN_ERROR", "Unknown error"


CRITICAL_ERROR_TYPES = frozenset(
    {
        ErrorType.NETWORK_ERROR.value,
        ErrorType.TIMEOUT_ERROR.value,
        ErrorType.AUTHENTICATION_ERROR.value,
        ErrorType.PERMISSION_ERROR.value,
    }
)

HIGH_ERROR_TYPES = frozenset(
    {
        ErrorType.VALIDATION_ERROR.value,
        ErrorType.FILE_ERROR.value,
        ErrorType.DATA_ERROR.value,
    }
)

CRITICAL_OPERATIONS = frozenset(
    {"claim_order", "bulk_claim_orders", "reverse_order", "bulk_reverse_orders"}
)

HIGH_SEVERITY_OPERATIONS = frozenset(
    {"mark_ready", "bulk_mark_ready", "download_label", "bulk_download_labels"}
)

DEFAULT_NOTIFICATION_TYPE = "vendor_operation_error"

# operation -> notification type tag
OPERATION_TYPES: dict[str, str] = {
    "claim_order": "order_claim_error",
    "bulk_claim_orders": "order_claim_error",
    "reverse_order": "reverse_order_failure",
    "bulk_reverse_orders": "reverse_order_failure",
    "mark_ready": "order_processing_error",
    "bulk_mark_ready": "order_processing_error",
    "download_label": "label_download_error",
    "bulk_download_labels": "label_download_error",
    "fetch_orders": "data_fetch_error",
    "refresh_orders": "data_refresh_error",
    "fetch_grouped_orders": "data_fetch_error",
    "fetch_payments": "data_fetch_error",
    "fetch_settlements": "data_fetch_error",
    "fetch_transactions": "data_fetch_error",
    "create_settlement_request": "settlement_error",
    "upload_payment_proof": "settlement_error",
    "fetch_address": "address_error",
    "update_address": "address_error",
}

# operation -> (title name, sentence name)
OPERATION_DISPLAY_NAMES: dict[str, tuple[str, str]] = {
    "claim_order": ("Order Claim", "order claim"),
    "bulk_claim_orders": ("Bulk Order Claim", "bulk order claim"),
    "reverse_order": ("Order Reverse", "order reverse"),
    "bulk_reverse_orders": ("Bulk Order Reverse", "bulk order reverse"),
    "mark_ready": ("Mark Order Ready", "mark order ready"),
    "bulk_mark_ready": ("Bulk Mark Orders Ready", "bulk mark orders ready"),
    "download_label": ("Label Download", "label download"),
    "bulk_download_labels": ("Bulk Label Download", "bulk label download"),
    "fetch_orders": ("Orders Fetch", "orders fetch"),
    "refresh_orders": ("Orders Refresh", "orders refresh"),
    "fetch_grouped_orders": ("Grouped Orders Fetch", "grouped orders fetch"),
    "fetch_payments": ("Payments Fetch", "payments fetch"),
    "fetch_settlements": ("Settlements Fetch", "settlements fetch"),
    "fetch_transactions": ("Transactions Fetch", "transactions fetch"),
    "create_settlement_request": ("Settlement Request", "settlement request creation"),
    "upload_payment_proof": ("Payment Proof Upload", "payment proof upload"),
    "fetch_address": ("Address Fetch", "address fetch"),
    "update_address": ("Address Update", "address update"),
}
