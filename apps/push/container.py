"""Builds the client-side notification services once and wires them together."""

from __future__ import annotations

from dataclasses import dataclass

from apps.notifications.classifier import ErrorClassifier, TrackingSession
from apps.notifications.stores import HttpNotificationStore, NotificationStore
from apps.notifications.triage import TriagePresenter
from apps.push.backends import HttpPushBackend, PushBackend
from apps.push.dispatch import AlertDispatcher
from apps.push.fallback import FallbackNotifier
from apps.push.platform import NotificationPlatform
from apps.push.preferences import NotificationPreferences
from apps.push.subscription import SubscriptionManager


@dataclass
class NotificationServices:
    classifier: ErrorClassifier
    triage: TriagePresenter
    fallback: FallbackNotifier
    subscriptions: SubscriptionManager
    dispatcher: AlertDispatcher
    preferences: NotificationPreferences


def build_services(
    platform: NotificationPlatform,
    store: NotificationStore | None = None,
    backend: PushBackend | None = None,
    session: TrackingSession | None = None,
) -> NotificationServices:
    """Create one instance of every service; callers pass these around explicitly."""
    store = store or HttpNotificationStore()
    backend = backend or HttpPushBackend()

    fallback = FallbackNotifier(platform)
    subscriptions = SubscriptionManager(platform, backend, fallback)
    return NotificationServices(
        classifier=ErrorClassifier(store, session=session),
        triage=TriagePresenter(store),
        fallback=fallback,
        subscriptions=subscriptions,
        dispatcher=AlertDispatcher(subscriptions, fallback),
        preferences=NotificationPreferences(subscriptions, fallback),
    )
