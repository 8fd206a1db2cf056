import json
import urllib.error
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, override_settings

from apps.push.gateways import LoggingPushGateway, WebhookPushGateway, get_gateway

SUBSCRIPTION = {"endpoint": "https://push.example.invalid/a", "keys": {"p256dh": "p", "auth": "a"}}
PAYLOAD = {"title": "Order Claim Failed", "body": "m"}


class GatewayRegistryTests(SimpleTestCase):
    @override_settings(PUSH_GATEWAY="logging")
    def test_default_from_settings(self):
        self.assertIsInstance(get_gateway(), LoggingPushGateway)

    def test_named(self):
        self.assertIsInstance(get_gateway("webhook"), WebhookPushGateway)

    def test_unknown(self):
        with self.assertRaises(ValueError):
            get_gateway("carrier-pigeon")


class WebhookPushGatewayTests(SimpleTestCase):
    def test_invalid_endpoint(self):
        result = WebhookPushGateway(endpoint="").deliver(SUBSCRIPTION, PAYLOAD)
        self.assertFalse(result.success)
        self.assertIn("PUSH_GATEWAY_ENDPOINT", result.error)

    @patch("apps.push.gateways.urllib.request.urlopen")
    def test_posts_subscription_and_payload(self, mock_urlopen):
        response = MagicMock()
        response.getcode.return_value = 201
        mock_urlopen.return_value.__enter__.return_value = response

        result = WebhookPushGateway(endpoint="https://relay.example.invalid/push").deliver(SUBSCRIPTION, PAYLOAD)

        self.assertTrue(result.success)
        self.assertEqual(result.metadata["status_code"], 201)
        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(json.loads(request.data), {"subscription": SUBSCRIPTION, "payload": PAYLOAD})

    @patch("apps.push.gateways.urllib.request.urlopen")
    def test_connection_error(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("refused")
        with self.assertLogs("apps.push.gateways", level="ERROR"):
            result = WebhookPushGateway(endpoint="https://relay.example.invalid/push").deliver(SUBSCRIPTION, PAYLOAD)
        self.assertFalse(result.success)
        self.assertIn("refused", result.error)
