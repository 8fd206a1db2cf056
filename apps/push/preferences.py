"""
Notification settings controller.

Backs the "notification settings" toggle of the admin dashboard: load the
current state, enable (push first, local alerts as fallback), disable and
send a test alert. The toggle is set optimistically and rolled back on any
failure so it never stays stuck in a half-enabled position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from apps.push.errors import SubscriptionError, SubscriptionErrorKind, humanize_error
from apps.push.fallback import FallbackNotifier
from apps.push.permissions import BrowserPermission
from apps.push.subscription import DeliveryChannel, SubscriptionManager

logger = logging.getLogger(__name__)

NOT_ENABLED_MESSAGE = "Notifications are not enabled. Please enable notifications first."
NOT_GRANTED_MESSAGE = "Notification permission is not granted. Please enable notifications first."


@dataclass
class PreferenceResult:
    ok: bool
    message: str
    enabled: bool


class NotificationPreferences:
    def __init__(self, manager: SubscriptionManager, fallback: FallbackNotifier):
        self.manager = manager
        self.fallback = fallback
        self.enabled = False

    @property
    def is_supported(self) -> bool:
        return self.manager.platform.is_supported()

    @property
    def permission(self) -> BrowserPermission:
        return self.manager.platform.permission()

    async def load(self) -> dict:
        if not self.is_supported:
            self.enabled = False
            return self.status()
        try:
            state = await self.manager.load()
        except Exception:
            logger.exception("Failed to load notification settings")
            self.enabled = False
            return self.status()
        self.enabled = state.is_subscribed
        return self.status()

    async def enable(self) -> PreferenceResult:
        self.enabled = True
        try:
            if not self.is_supported:
                raise SubscriptionError(SubscriptionErrorKind.UNSUPPORTED, "This browser does not support notifications")
            try:
                await self.manager.subscribe()
            except SubscriptionError as e:
                if e.kind is not SubscriptionErrorKind.SERVER_REJECTED:
                    raise
                logger.info(f"Push notifications failed, falling back to local alerts: {e}")
                if not await self.fallback.enable():
                    raise SubscriptionError(
                        SubscriptionErrorKind.PERMISSION_DENIED, "Notification permission denied by user"
                    ) from e
                return self._ok("Browser notifications enabled successfully (Push notifications not available)")
        except Exception as e:
            logger.error(f"Error enabling notifications: {e}")
            self.enabled = False
            return PreferenceResult(ok=False, message=humanize_error(e), enabled=False)

        if self.manager.channel is DeliveryChannel.PUSH:
            return self._ok("Push notifications enabled successfully")
        return self._ok("Browser notifications enabled successfully (Push notifications not available)")

    async def disable(self) -> PreferenceResult:
        try:
            await self.manager.unsubscribe()
        except SubscriptionError as e:
            # The manager is already non-subscribed; only the backend call failed.
            logger.warning(f"Push unsubscribe incomplete: {e}")
        self.fallback.disable()
        self.enabled = False
        return PreferenceResult(ok=True, message="Notifications disabled successfully", enabled=False)

    async def toggle(self, enabled: bool) -> PreferenceResult:
        if enabled:
            return await self.enable()
        return await self.disable()

    async def send_test(self) -> PreferenceResult:
        if not self.enabled:
            return PreferenceResult(ok=False, message=NOT_ENABLED_MESSAGE, enabled=self.enabled)
        if self.permission is not BrowserPermission.GRANTED:
            return PreferenceResult(ok=False, message=NOT_GRANTED_MESSAGE, enabled=self.enabled)

        shown = await self.fallback.show_test_notification(require_enabled=False)
        if shown is None:
            return PreferenceResult(ok=False, message="Failed to send test notification", enabled=self.enabled)
        return PreferenceResult(ok=True, message="Test notification sent successfully!", enabled=self.enabled)

    def status(self) -> dict:
        return {
            "is_supported": self.is_supported,
            "is_enabled": self.enabled,
            "permission": self.permission.value,
            "subscription": self.manager.status().to_dict(),
        }

    def _ok(self, message: str) -> PreferenceResult:
        self.enabled = True
        logger.info(message)
        return PreferenceResult(ok=True, message=message, enabled=True)
