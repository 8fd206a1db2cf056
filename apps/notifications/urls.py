"""
URL configuration for the notifications app.
"""

from django.urls import path

from apps.notifications.views import (
    NotificationDetailView,
    NotificationDismissView,
    NotificationListView,
    NotificationResolveView,
    NotificationStatsView,
)

app_name = "notifications"

urlpatterns = [
    path("", NotificationListView.as_view(), name="list"),
    path("stats/", NotificationStatsView.as_view(), name="stats"),
    path("<int:notification_id>/", NotificationDetailView.as_view(), name="detail"),
    path("<int:notification_id>/resolve/", NotificationResolveView.as_view(), name="resolve"),
    path("<int:notification_id>/dismiss/", NotificationDismissView.as_view(), name="dismiss"),
]
