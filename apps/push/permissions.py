"""
Permission reconciliation between the browser and the backend.

Browser permission is authoritative: `denied` means no delivery regardless of
what the backend has stored. Only when permission is `granted` does the
backend subscription flag decide between subscribed and unsubscribed.
"""

from enum import Enum


class BrowserPermission(Enum):
    """Notification permission as reported by the browser."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class SubscriptionState(Enum):
    """States of the admin subscription state machine."""

    UNSUPPORTED = "unsupported"
    PERMISSION_DEFAULT = "permission_default"
    PERMISSION_DENIED = "permission_denied"
    GRANTED_UNSUBSCRIBED = "granted_unsubscribed"
    GRANTED_SUBSCRIBED = "granted_subscribed"

    @property
    def is_subscribed(self) -> bool:
        return self is SubscriptionState.GRANTED_SUBSCRIBED


def reconcile_state(
    permission: BrowserPermission,
    backend_subscribed: bool,
    supported: bool = True,
) -> SubscriptionState:
    """Derive the effective subscription state from both signals."""
    if not supported:
        return SubscriptionState.UNSUPPORTED
    if permission is BrowserPermission.DENIED:
        return SubscriptionState.PERMISSION_DENIED
    if permission is BrowserPermission.DEFAULT:
        return SubscriptionState.PERMISSION_DEFAULT
    if backend_subscribed:
        return SubscriptionState.GRANTED_SUBSCRIBED
    return SubscriptionState.GRANTED_UNSUBSCRIBED
