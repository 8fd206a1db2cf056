"""Subscription failure taxonomy and user-facing messages."""

from enum import Enum


class SubscriptionErrorKind(Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission-denied"
    SERVER_REJECTED = "server-rejected"


class SubscriptionError(Exception):
    """Raised by subscription operations; `kind` says which failure occurred."""

    def __init__(self, kind: SubscriptionErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


DENIED_MESSAGE = (
    "Notification permission was denied. "
    "Please enable notifications in your browser settings."
)
UNSUPPORTED_MESSAGE = (
    "Your browser does not support notifications. "
    "Please use a modern browser like Chrome, Firefox, or Safari."
)


def humanize_error(error: BaseException, default: str = "Failed to enable notifications") -> str:
    """Map a raw failure to guidance an administrator can act on."""
    kind = getattr(error, "kind", None)
    text = str(error)
    if kind is SubscriptionErrorKind.PERMISSION_DENIED or "denied" in text.lower():
        return DENIED_MESSAGE
    if kind is SubscriptionErrorKind.UNSUPPORTED or "not supported" in text.lower():
        return UNSUPPORTED_MESSAGE
    return text or default
