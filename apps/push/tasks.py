"""Celery tasks fanning new notifications out to subscribed administrators."""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def fan_out_notification(notification_id: int) -> dict[str, Any]:
    """Build the push payload for one notification and deliver it to every active subscription."""
    from apps.notifications.models import Notification
    from apps.push.gateways import get_gateway
    from apps.push.services import PushSubscriptionService

    try:
        notification = Notification.objects.get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} vanished before fan-out")
        return {"notification_id": notification_id, "sent": 0, "failed": 0, "skipped": True}

    result = PushSubscriptionService().deliver(notification, get_gateway())
    return {**result.to_dict(), "skipped": False}
