import io
import json
import urllib.error
from unittest.mock import AsyncMock, MagicMock, patch

from django.test import SimpleTestCase, TestCase

from apps.notifications.dtos import NotificationDraft, NotificationQuery
from apps.notifications.models import Notification
from apps.notifications.stores import ApiError, HttpNotificationStore, JsonApiClient, LocalNotificationStore


def _response(payload):
    response = MagicMock()
    response.read.return_value = json.dumps(payload).encode("utf-8")
    response.__enter__.return_value = response
    return response


class JsonApiClientTests(SimpleTestCase):
    def setUp(self):
        self.client = JsonApiClient(base_url="https://ops.example.com/", token="t0k", timeout=5)

    def test_build_url(self):
        self.assertEqual(
            self.client.build_url("/notifications/", {"page": 2, "status": "pending"}),
            "https://ops.example.com/notifications/?page=2&status=pending",
        )

    @patch("apps.notifications.stores.urllib.request.urlopen")
    def test_request_sends_token_and_body(self, urlopen):
        urlopen.return_value = _response({"status": "success", "data": {"id": 3}})

        payload = self.client.request("POST", "/notifications/", body={"title": "x"})

        self.assertEqual(payload["data"]["id"], 3)
        request = urlopen.call_args.args[0]
        self.assertEqual(request.get_header("Authorization"), "Bearer t0k")
        self.assertEqual(json.loads(request.data), {"title": "x"})
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 5)

    @patch("apps.notifications.stores.urllib.request.urlopen")
    def test_error_envelope_raises(self, urlopen):
        urlopen.return_value = _response({"status": "error", "message": "nope"})
        with self.assertRaisesMessage(ApiError, "nope"):
            self.client.request("GET", "/notifications/")

    @patch("apps.notifications.stores.urllib.request.urlopen")
    def test_http_error_carries_status(self, urlopen):
        urlopen.side_effect = urllib.error.HTTPError(
            "https://ops.example.com/x", 409, "Conflict", {}, io.BytesIO(b'{"status":"error","message":"terminal"}')
        )
        with self.assertLogs("apps.notifications.stores", level="ERROR"):
            with self.assertRaises(ApiError) as ctx:
                self.client.request("POST", "/x")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(str(ctx.exception), "terminal")

    @patch("apps.notifications.stores.urllib.request.urlopen")
    def test_url_error(self, urlopen):
        urlopen.side_effect = urllib.error.URLError("refused")
        with self.assertLogs("apps.notifications.stores", level="ERROR"):
            with self.assertRaises(ApiError):
                self.client.request("GET", "/x")


class HttpNotificationStoreTests(SimpleTestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.arequest = AsyncMock()
        self.store = HttpNotificationStore(self.client)

    async def test_list_parses_envelope(self):
        self.client.arequest.return_value = {
            "status": "success",
            "data": {
                "notifications": [
                    {"id": 1, "type": "t", "severity": "low", "title": "A", "message": "", "order_id": None, "extra": 1}
                ],
                "pagination": {"page": 2, "pages": 4, "total": 61},
            },
        }
        page = await self.store.list_notifications(NotificationQuery(page=2, status="all", severity="low"))

        self.assertEqual((page.page, page.pages, page.total), (2, 4, 61))
        self.assertEqual(page.items[0].order_id, "")
        self.assertEqual(
            self.client.arequest.await_args.kwargs["params"], {"page": 2, "limit": 20, "severity": "low"}
        )

    async def test_resolve_and_dismiss_bodies(self):
        self.client.arequest.return_value = {"status": "success", "data": {}}
        await self.store.resolve_notification(4, "done")
        self.client.arequest.assert_awaited_with("POST", "/notifications/4/resolve/", body={"resolution_notes": "done"})
        await self.store.dismiss_notification(4, "dup")
        self.client.arequest.assert_awaited_with("POST", "/notifications/4/dismiss/", body={"reason": "dup"})

    async def test_create_returns_id(self):
        self.client.arequest.return_value = {"status": "success", "data": {"id": "12"}}
        draft = NotificationDraft(type="t", severity="high", title="T", message="m")
        self.assertEqual(await self.store.create_notification(draft), 12)


class LocalNotificationStoreTests(TestCase):
    async def test_round_trip_through_service(self):
        store = LocalNotificationStore(actor="cli")
        pk = await store.create_notification(
            NotificationDraft(type="order_claim_error", severity="critical", title="T", message="m")
        )
        await store.resolve_notification(pk, "fixed")

        notification = await Notification.objects.aget(pk=pk)
        self.assertEqual(notification.status, "resolved")
        self.assertEqual(notification.resolved_by, "cli")
        stats = await store.get_stats()
        self.assertEqual(stats.resolved, 1)
