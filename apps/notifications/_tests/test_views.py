import json

from django.contrib.auth import get_user_model
from django.test import Client, TestCase, override_settings
from django.urls import reverse

from apps.notifications.dtos import NotificationDraft
from apps.notifications.services import NotificationService

TOKEN = "service-token"


def _create(**overrides):
    values = {
        "type": "order_claim_error",
        "severity": "high",
        "title": "Order Claim Failed",
        "message": "m",
    }
    values.update(overrides)
    return NotificationService().create(NotificationDraft(**values))


class NotificationApiTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.vendor = User.objects.create_user("vendor", password="pw")
        self.client = Client()
        self.client.force_login(self.admin)

    def _post(self, url, payload, **extra):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json", **extra)

    def test_requires_authentication(self):
        response = Client().get(reverse("notifications:list"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["status"], "error")

    def test_list_requires_staff(self):
        client = Client()
        client.force_login(self.vendor)
        self.assertEqual(client.get(reverse("notifications:list")).status_code, 403)

    def test_list_envelope(self):
        _create()
        _create(severity="critical")
        response = self.client.get(reverse("notifications:list"), {"severity": "critical", "limit": 5})
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(len(data["notifications"]), 1)
        self.assertEqual(data["pagination"], {"page": 1, "pages": 1, "total": 1})

    def test_vendor_can_create(self):
        client = Client()
        client.force_login(self.vendor)
        response = client.post(
            reverse("notifications:list"),
            data=json.dumps({"type": "order_claim_error", "severity": "critical", "title": "T", "order_id": 5}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 201)
        notification = NotificationService().get(response.json()["data"]["id"])
        self.assertEqual(notification.order_id, "5")

    def test_create_validation(self):
        response = self._post(reverse("notifications:list"), {"type": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("severity", response.json()["message"])

        response = self.client.post(reverse("notifications:list"), data="nope", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    @override_settings(NOTIFICATIONS_API_TOKEN=TOKEN)
    def test_service_token(self):
        _create()
        response = Client().get(reverse("notifications:list"), HTTP_AUTHORIZATION=f"Bearer {TOKEN}")
        self.assertEqual(response.status_code, 200)
        response = Client().get(reverse("notifications:list"), HTTP_AUTHORIZATION="Bearer wrong")
        self.assertEqual(response.status_code, 401)

    def test_resolve(self):
        notification = _create()
        url = reverse("notifications:resolve", args=[notification.pk])

        self.assertEqual(self._post(url, {"resolution_notes": " "}).status_code, 400)
        response = self._post(url, {"resolution_notes": "fixed upstream"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["status"], "resolved")
        self.assertEqual(response.json()["data"]["resolved_by"], "admin")

        self.assertEqual(self._post(url, {"resolution_notes": "again"}).status_code, 409)

    def test_dismiss_default_reason(self):
        notification = _create()
        response = self._post(reverse("notifications:dismiss", args=[notification.pk]), {})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["dismiss_reason"], "Dismissed by admin")

    def test_missing_notification(self):
        self.assertEqual(self._post(reverse("notifications:dismiss", args=[4242]), {}).status_code, 404)
        self.assertEqual(self.client.get(reverse("notifications:detail", args=[4242])).status_code, 404)

    def test_stats(self):
        _create(severity="critical")
        response = self.client.get(reverse("notifications:stats"))
        self.assertEqual(response.json()["data"]["critical"], 1)
        self.assertEqual(response.json()["data"]["pending"], 1)
