"""
Local-permission alert channel.

Used when the push channel cannot register an endpoint (no VAPID key, push
manager missing, backend rejection). It only needs notification permission
and keeps its own enabled flag, so an admin can mute in-app alerts without
revoking the browser permission.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings

from apps.notifications.dtos import NotificationRecord
from apps.push.permissions import BrowserPermission
from apps.push.platform import DEFAULT_BADGE, DEFAULT_ICON, AlertOptions, NotificationPlatform, ShownAlert

logger = logging.getLogger(__name__)

TEST_TITLE = "Test Notification"
TEST_BODY = "This is a test notification from the vendor operations admin panel"
TEST_TAG = "test-notification"


@dataclass
class LocalAlert:
    """Content of a local alert."""

    title: str
    body: str
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_BADGE
    tag: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_notification(cls, notification: NotificationRecord) -> LocalAlert:
        return cls(
            title=notification.title,
            body=notification.message,
            tag=f"vendor-error-{notification.id}",
            data={
                "type": "vendor_error",
                "notification_id": notification.id,
                "severity": notification.severity,
                "order_id": notification.order_id or None,
                "vendor_name": notification.vendor_name or None,
            },
        )

    def options(self) -> AlertOptions:
        return AlertOptions(
            body=self.body,
            icon=self.icon,
            badge=self.badge,
            tag=self.tag,
            data=dict(self.data),
        )


class FallbackNotifier:
    """Shows local alerts when permission is granted and the channel is enabled."""

    def __init__(self, platform: NotificationPlatform, auto_dismiss_seconds: float | None = None):
        self.platform = platform
        if auto_dismiss_seconds is None:
            auto_dismiss_seconds = getattr(settings, "PUSH_FALLBACK_AUTO_DISMISS_SECONDS", 5)
        self.auto_dismiss_seconds = auto_dismiss_seconds
        self.is_enabled = False

    @property
    def is_supported(self) -> bool:
        return self.platform.is_supported()

    def permission(self) -> BrowserPermission:
        return self.platform.permission()

    async def enable(self) -> bool:
        """Request permission; the channel is enabled only if it is granted."""
        if not self.is_supported:
            self.is_enabled = False
            return False
        permission = await self.platform.request_permission()
        self.is_enabled = permission is BrowserPermission.GRANTED
        logger.info(f"Local alerts {'enabled' if self.is_enabled else 'not enabled'} (permission: {permission.value})")
        return self.is_enabled

    def disable(self) -> None:
        self.is_enabled = False

    def can_show(self) -> bool:
        return self.is_supported and self.is_enabled and self.permission() is BrowserPermission.GRANTED

    async def show(self, alert: LocalAlert, require_enabled: bool = True) -> ShownAlert | None:
        """
        Display `alert`; returns None when the channel is not available.

        `require_enabled=False` only checks permission (test alerts sent while
        the push channel is active).
        """
        allowed = self.can_show() if require_enabled else self.permission() is BrowserPermission.GRANTED
        if not (self.is_supported and allowed):
            logger.debug("Local alerts not available or not enabled")
            return None

        shown = self.platform.show(alert.title, alert.options())

        def on_click(action: str) -> None:
            self.platform.focus_window()
            shown.close()

        shown.on_click = on_click
        asyncio.get_running_loop().call_later(self.auto_dismiss_seconds, shown.close)
        return shown

    async def show_notification(self, notification: NotificationRecord) -> ShownAlert | None:
        return await self.show(LocalAlert.from_notification(notification))

    async def show_test_notification(self, require_enabled: bool = True) -> ShownAlert | None:
        return await self.show(LocalAlert(title=TEST_TITLE, body=TEST_BODY, tag=TEST_TAG), require_enabled)

    def status(self) -> dict[str, Any]:
        return {
            "is_supported": self.is_supported,
            "is_enabled": self.is_enabled,
            "permission": self.permission().value,
        }
