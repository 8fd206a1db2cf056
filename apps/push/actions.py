"""Incoming push message display and click handling."""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings

from apps.push.platform import DEFAULT_BADGE, DEFAULT_ICON, AlertOptions, NotificationPlatform, ShownAlert

logger = logging.getLogger(__name__)

VIEW_ACTION = "view"
DISMISS_ACTION = "dismiss"


def default_url() -> str:
    return getattr(settings, "PUSH_DEFAULT_URL", "/admin/orders")


def dispatch_alert_action(alert: ShownAlert, action: str, platform: NotificationPlatform) -> str:
    """
    Handle one click on a displayed alert.

    `view` opens the notification URL, `dismiss` closes the alert, anything
    else (a click on the body) focuses the app and closes the alert.
    Returns the handled action name.
    """
    if action == VIEW_ACTION:
        platform.open_window(alert.options.data.get("url") or default_url())
        alert.close()
        return VIEW_ACTION
    if action == DISMISS_ACTION:
        alert.close()
        return DISMISS_ACTION
    platform.focus_window()
    alert.close()
    return "default"


def alert_options_from_payload(payload: dict[str, Any]) -> AlertOptions:
    data = dict(payload.get("data") or {})
    notification_id = data.get("notification_id")
    return AlertOptions(
        body=payload.get("body", ""),
        icon=payload.get("icon") or DEFAULT_ICON,
        badge=payload.get("badge") or DEFAULT_BADGE,
        tag=payload.get("tag") or (f"notification-{notification_id}" if notification_id is not None else None),
        data=data,
        require_interaction=bool(payload.get("requireInteraction", False)),
        actions=list(payload.get("actions") or []),
    )


def handle_push_message(payload: dict[str, Any] | None, platform: NotificationPlatform) -> ShownAlert | None:
    """Display a received push payload and wire its click handling."""
    if not payload or not payload.get("title"):
        logger.debug("Ignoring empty push message")
        return None

    alert = platform.show(payload["title"], alert_options_from_payload(payload))
    alert.on_click = lambda action: dispatch_alert_action(alert, action, platform)
    return alert
