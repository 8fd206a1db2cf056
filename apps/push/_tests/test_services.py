from django.contrib.auth import get_user_model
from django.test import TestCase

from apps.notifications.dtos import NotificationDraft
from apps.notifications.services import NotificationService
from apps.push.gateways import DeliveryResult, LoggingPushGateway, PushGateway
from apps.push.models import PushSubscription
from apps.push.services import PushSubscriptionService, build_payload

SUBSCRIPTION = {
    "endpoint": "https://push.example.invalid/send/abc",
    "keys": {"p256dh": "BPk", "auth": "aGk"},
}


def _notification(**overrides):
    values = {
        "type": "order_claim_error",
        "severity": "critical",
        "title": "Order Claim Failed",
        "message": "Vendor could not claim order",
        "order_id": "42",
    }
    values.update(overrides)
    return NotificationService().create(NotificationDraft(**values))


class FailingGateway(PushGateway):
    name = "failing"

    def deliver(self, subscription, payload):
        return DeliveryResult(success=False, error="gone")


class PushSubscriptionServiceTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.other = User.objects.create_user("other", password="pw", is_staff=True)
        self.vendor = User.objects.create_user("vendor", password="pw")
        self.service = PushSubscriptionService()

    def test_subscribe_creates_and_updates(self):
        first = self.service.subscribe(self.admin, SUBSCRIPTION, user_agent="Firefox")
        second = self.service.subscribe(
            self.admin, {**SUBSCRIPTION, "keys": {"p256dh": "new", "auth": "key"}}
        )
        self.assertEqual(first.pk, second.pk)
        second.refresh_from_db()
        self.assertEqual(second.p256dh, "new")
        self.assertEqual(PushSubscription.objects.count(), 1)

    def test_subscribe_reenables_disabled_endpoint(self):
        subscription = self.service.subscribe(self.admin, SUBSCRIPTION)
        PushSubscription.objects.filter(pk=subscription.pk).update(enabled=False)
        self.assertFalse(self.service.is_subscribed(self.admin))
        self.service.subscribe(self.admin, SUBSCRIPTION)
        self.assertTrue(self.service.is_subscribed(self.admin))

    def test_subscribe_requires_keys(self):
        with self.assertRaises(ValueError):
            self.service.subscribe(self.admin, {"endpoint": SUBSCRIPTION["endpoint"]})
        with self.assertRaises(ValueError):
            self.service.subscribe(self.admin, {"keys": SUBSCRIPTION["keys"]})

    def test_unsubscribe(self):
        self.service.subscribe(self.admin, SUBSCRIPTION)
        self.assertEqual(self.service.unsubscribe(self.admin), 1)
        self.assertFalse(self.service.is_subscribed(self.admin))
        self.assertEqual(self.service.unsubscribe(self.admin), 0)

    def test_active_subscriptions_exclude_non_staff(self):
        self.service.subscribe(self.admin, SUBSCRIPTION)
        self.service.subscribe(self.vendor, {**SUBSCRIPTION, "endpoint": "https://push.example.invalid/v"})
        users = [s.user for s in self.service.active_subscriptions()]
        self.assertEqual(users, [self.admin])

    def test_stats(self):
        self.service.subscribe(self.admin, SUBSCRIPTION)
        self.service.subscribe(self.admin, {**SUBSCRIPTION, "endpoint": "https://push.example.invalid/2"})
        disabled = self.service.subscribe(self.other, SUBSCRIPTION)
        PushSubscription.objects.filter(pk=disabled.pk).update(enabled=False)

        stats = self.service.stats()

        self.assertEqual(stats.total_admins, 2)
        self.assertEqual(stats.subscribed_admins, 2)
        self.assertEqual(stats.enabled_admins, 1)
        self.assertEqual(stats.active_subscriptions, 2)

    def test_deliver_counts_results(self):
        self.service.subscribe(self.admin, SUBSCRIPTION)
        self.service.subscribe(self.other, SUBSCRIPTION)
        notification = _notification()

        with self.assertLogs("apps.push", level="INFO"):
            sent = self.service.deliver(notification, LoggingPushGateway())
        self.assertEqual((sent.sent, sent.failed), (2, 0))

        with self.assertLogs("apps.push", level="WARNING"):
            failed = self.service.deliver(notification, FailingGateway())
        self.assertEqual((failed.sent, failed.failed), (0, 2))
        self.assertEqual(len(failed.errors), 2)


class BuildPayloadTests(TestCase):
    def test_critical_payload(self):
        notification = _notification()
        payload = build_payload(notification)

        self.assertEqual(payload["title"], "Order Claim Failed")
        self.assertEqual(payload["tag"], f"notification-{notification.pk}")
        self.assertTrue(payload["requireInteraction"])
        self.assertEqual(payload["data"]["notification_id"], notification.pk)
        self.assertEqual(payload["data"]["order_id"], "42")
        self.assertIsNone(payload["data"]["vendor_name"])
        self.assertEqual([a["action"] for a in payload["actions"]], ["view", "dismiss"])

    def test_non_critical_does_not_require_interaction(self):
        payload = build_payload(_notification(severity="medium"))
        self.assertFalse(payload["requireInteraction"])
