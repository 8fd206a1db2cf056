"""Routes a new-notification event to exactly one delivery channel."""

from __future__ import annotations

import logging

from apps.notifications.dtos import NotificationRecord
from apps.push.fallback import FallbackNotifier
from apps.push.subscription import DeliveryChannel, SubscriptionManager

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """
    Push and local alerts never both fire for the same event.

    With an active push endpoint the push network delivers the alert and the
    client shows nothing itself; otherwise the fallback notifier does.
    """

    def __init__(self, manager: SubscriptionManager, fallback: FallbackNotifier):
        self.manager = manager
        self.fallback = fallback

    def channel_for(self) -> DeliveryChannel:
        self.manager.sync_permission()
        if self.manager.is_subscribed and self.manager.channel is DeliveryChannel.PUSH:
            return DeliveryChannel.PUSH
        if self.fallback.can_show():
            return DeliveryChannel.LOCAL
        return DeliveryChannel.NONE

    async def notify(self, notification: NotificationRecord) -> DeliveryChannel:
        channel = self.channel_for()
        if channel is DeliveryChannel.LOCAL:
            await self.fallback.show_notification(notification)
        logger.debug(f"Notification {notification.id} routed to {channel.value}")
        return channel
