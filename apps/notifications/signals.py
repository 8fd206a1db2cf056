"""
Model signal handlers for notifications.

A newly created notification is queued for push fan-out once the creating
transaction commits.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


def _enqueue_fan_out(notification_id: int) -> None:
    from apps.push.tasks import fan_out_notification

    try:
        fan_out_notification.delay(notification_id)
    except Exception:
        # Broker outages must not break notification creation.
        logger.exception(f"Failed to enqueue push fan-out for notification {notification_id}")


@receiver(post_save, sender=Notification, dispatch_uid="notifications_fan_out")
def fan_out_on_create(sender, instance, created, **kwargs):
    if not created or not getattr(settings, "NOTIFICATIONS_FAN_OUT_ENABLED", True):
        return
    transaction.on_commit(lambda: _enqueue_fan_out(instance.pk))
