"""
Server-side push subscription registry and payload building.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.notifications.models import Notification
from apps.notifications.taxonomy import NotificationSeverity
from apps.push.models import PushSubscription

logger = logging.getLogger(__name__)

PUSH_ICON = "/icon-192x192.png"
PUSH_BADGE = "/icon-72x72.png"


@dataclass
class PushStats:
    total_admins: int = 0
    enabled_admins: int = 0
    subscribed_admins: int = 0
    active_subscriptions: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class FanOutResult:
    notification_id: int
    sent: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_payload(notification: Notification) -> dict[str, Any]:
    """Push payload for a newly created notification."""
    default_url = getattr(settings, "PUSH_DEFAULT_URL", "/admin/orders")
    return {
        "title": notification.title,
        "body": notification.message,
        "icon": PUSH_ICON,
        "badge": PUSH_BADGE,
        "tag": f"notification-{notification.pk}",
        "data": {
            "notification_id": notification.pk,
            "type": notification.type,
            "severity": notification.severity,
            "order_id": notification.order_id or None,
            "vendor_name": notification.vendor_name or None,
            "url": default_url,
        },
        "requireInteraction": notification.severity == NotificationSeverity.CRITICAL.value,
        "actions": [
            {"action": "view", "title": "View"},
            {"action": "dismiss", "title": "Dismiss"},
        ],
    }


class PushSubscriptionService:
    """Registers, removes and reports admin push subscriptions."""

    def subscribe(self, user, data: dict[str, Any], user_agent: str = "") -> PushSubscription:
        """
        Register (or re-enable) an endpoint for `user`.

        `data` is {"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}.
        Raises ValueError when any part is missing.
        """
        endpoint = (data.get("endpoint") or "").strip()
        keys = data.get("keys") or {}
        p256dh = (keys.get("p256dh") or "").strip()
        auth = (keys.get("auth") or "").strip()
        if not endpoint or not p256dh or not auth:
            raise ValueError("endpoint, keys.p256dh and keys.auth are required")

        with transaction.atomic():
            subscription, created = PushSubscription.objects.update_or_create(
                user=user,
                endpoint=endpoint,
                defaults={
                    "p256dh": p256dh,
                    "auth": auth,
                    "user_agent": (user_agent or "")[:500],
                    "enabled": True,
                },
            )
        logger.info(f"Push subscription {'created' if created else 'updated'} for {user}")
        return subscription

    def unsubscribe(self, user) -> int:
        deleted, _ = PushSubscription.objects.filter(user=user).delete()
        logger.info(f"Removed {deleted} push subscription(s) for {user}")
        return deleted

    def is_subscribed(self, user) -> bool:
        return PushSubscription.objects.filter(user=user, enabled=True).exists()

    def active_subscriptions(self):
        return PushSubscription.objects.filter(
            enabled=True, user__is_active=True, user__is_staff=True
        ).select_related("user")

    def stats(self) -> PushStats:
        User = get_user_model()
        admins = User.objects.filter(is_staff=True, is_active=True)
        subscriptions = PushSubscription.objects.filter(user__in=admins).order_by()
        return PushStats(
            total_admins=admins.count(),
            enabled_admins=subscriptions.filter(enabled=True).values("user").distinct().count(),
            subscribed_admins=subscriptions.values("user").distinct().count(),
            active_subscriptions=subscriptions.filter(enabled=True).count(),
        )

    def deliver(self, notification: Notification, gateway) -> FanOutResult:
        """Send `notification` through `gateway` to every active subscription."""
        payload = build_payload(notification)
        result = FanOutResult(notification_id=notification.pk)
        for subscription in self.active_subscriptions():
            delivery = gateway.deliver(subscription.to_subscription_info(), payload)
            if delivery.success:
                result.sent += 1
            else:
                result.failed += 1
                result.errors.append(f"{subscription.user}: {delivery.error}")
                logger.warning(f"Push delivery to {subscription.user} failed: {delivery.error}")
        logger.info(f"Notification {notification.pk} fanned out: {result.sent} sent, {result.failed} failed")
        return result
