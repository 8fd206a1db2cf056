"""Views for the notifications app."""

from apps.notifications.views.notifications import (
    NotificationDetailView,
    NotificationDismissView,
    NotificationListView,
    NotificationResolveView,
    NotificationStatsView,
)

__all__ = [
    "NotificationListView",
    "NotificationDetailView",
    "NotificationResolveView",
    "NotificationDismissView",
    "NotificationStatsView",
]
