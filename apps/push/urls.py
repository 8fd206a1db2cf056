"""
URL configuration for the push app.
"""

from django.urls import path

from apps.push.views import (
    PushStatsView,
    PushStatusView,
    PushSubscribeView,
    PushUnsubscribeView,
    VapidKeyView,
)

app_name = "push"

urlpatterns = [
    path("vapid-key/", VapidKeyView.as_view(), name="vapid-key"),
    path("status/", PushStatusView.as_view(), name="status"),
    path("subscribe/", PushSubscribeView.as_view(), name="subscribe"),
    path("unsubscribe/", PushUnsubscribeView.as_view(), name="unsubscribe"),
    path("stats/", PushStatsView.as_view(), name="stats"),
]
