from unittest.mock import AsyncMock

from django.test import SimpleTestCase

from apps.notifications.dtos import NotificationRecord
from apps.notifications.stores import ApiError
from apps.push.backends import PushBackend
from apps.push.container import build_services
from apps.push.errors import DENIED_MESSAGE, UNSUPPORTED_MESSAGE
from apps.push.permissions import BrowserPermission
from apps.push.platform import HeadlessPlatform
from apps.push.subscription import DeliveryChannel

VAPID_KEY = "BEl62iUYgUivxIkv69yViEuiBIa-Ib9-SkvMeAtA3LFgDzkrxZJjSgSnfckjBJuBkr3qBUYIHBQFLXYp5Nksh8U"


def _services(platform=None, key=VAPID_KEY):
    backend = AsyncMock(spec=PushBackend)
    backend.get_vapid_public_key.return_value = key
    backend.get_subscription_status.return_value = False
    platform = platform or HeadlessPlatform()
    services = build_services(platform, store=AsyncMock(), backend=backend)
    services.fallback.auto_dismiss_seconds = 0.01
    return services, platform, backend


class NotificationPreferencesTests(SimpleTestCase):
    async def test_enable_push(self):
        services, _, _ = _services()
        result = await services.preferences.enable()
        self.assertTrue(result.ok)
        self.assertEqual(result.message, "Push notifications enabled successfully")
        self.assertTrue(services.preferences.enabled)

    async def test_enable_without_vapid(self):
        services, _, _ = _services(key=None)
        result = await services.preferences.enable()
        self.assertTrue(result.ok)
        self.assertIn("Push notifications not available", result.message)
        self.assertTrue(services.fallback.is_enabled)

    async def test_enable_falls_back_on_server_rejection(self):
        services, _, backend = _services()
        backend.subscribe.side_effect = ApiError("push service unavailable")
        with self.assertLogs("apps.push", level="INFO"):
            result = await services.preferences.enable()
        self.assertTrue(result.ok)
        self.assertTrue(services.fallback.is_enabled)
        self.assertFalse(services.subscriptions.is_subscribed)

    async def test_enable_denied_rolls_back(self):
        services, _, _ = _services(HeadlessPlatform(permission=BrowserPermission.DENIED))
        result = await services.preferences.enable()
        self.assertFalse(result.ok)
        self.assertFalse(result.enabled)
        self.assertFalse(services.preferences.enabled)
        self.assertEqual(result.message, DENIED_MESSAGE)

    async def test_enable_unsupported(self):
        services, _, _ = _services(HeadlessPlatform(supported=False))
        result = await services.preferences.enable()
        self.assertFalse(result.ok)
        self.assertEqual(result.message, UNSUPPORTED_MESSAGE)

    async def test_disable(self):
        services, _, backend = _services()
        await services.preferences.enable()
        result = await services.preferences.disable()
        self.assertTrue(result.ok)
        self.assertFalse(services.preferences.enabled)
        self.assertFalse(services.fallback.is_enabled)
        backend.unsubscribe.assert_awaited_once()

    async def test_disable_tolerates_backend_failure(self):
        services, _, backend = _services()
        await services.preferences.enable()
        backend.unsubscribe.side_effect = ApiError("gone")
        with self.assertLogs("apps.push", level="WARNING"):
            result = await services.preferences.disable()
        self.assertTrue(result.ok)
        self.assertFalse(services.subscriptions.is_subscribed)

    async def test_send_test_requires_enabled(self):
        services, platform, _ = _services()
        result = await services.preferences.send_test()
        self.assertFalse(result.ok)
        self.assertEqual(platform.shown, [])

    async def test_send_test_with_push_channel(self):
        services, platform, _ = _services()
        await services.preferences.enable()
        result = await services.preferences.send_test()
        self.assertTrue(result.ok)
        self.assertEqual(platform.shown[-1].options.tag, "test-notification")

    async def test_load_reflects_browser_permission(self):
        services, _, backend = _services(HeadlessPlatform(permission=BrowserPermission.DENIED))
        backend.get_subscription_status.return_value = True
        status = await services.preferences.load()
        self.assertFalse(status["is_enabled"])
        self.assertEqual(status["permission"], "denied")


class AlertDispatcherTests(SimpleTestCase):
    def _record(self):
        return NotificationRecord(id=1, type="t", severity="high", title="T", message="m")

    async def test_push_channel_shows_nothing_locally(self):
        services, platform, _ = _services()
        await services.subscriptions.subscribe()
        services.fallback.is_enabled = True

        channel = await services.dispatcher.notify(self._record())

        self.assertEqual(channel, DeliveryChannel.PUSH)
        self.assertEqual(platform.shown, [])

    async def test_local_channel(self):
        services, platform, _ = _services(key=None)
        await services.subscriptions.subscribe()

        channel = await services.dispatcher.notify(self._record())

        self.assertEqual(channel, DeliveryChannel.LOCAL)
        self.assertEqual(len(platform.shown), 1)

    async def test_nothing_when_disabled(self):
        services, platform, _ = _services()
        self.assertEqual(await services.dispatcher.notify(self._record()), DeliveryChannel.NONE)
        self.assertEqual(platform.shown, [])

    async def test_reload_keeps_toggle_and_delivery_in_step(self):
        services, platform, _ = _services(HeadlessPlatform(permission=BrowserPermission.GRANTED), key=None)
        self.assertTrue((await services.preferences.enable()).ok)

        status = await services.preferences.load()

        self.assertFalse(status["is_enabled"])
        self.assertEqual(status["subscription"]["state"], "granted_unsubscribed")
        self.assertEqual(await services.dispatcher.notify(self._record()), DeliveryChannel.NONE)
        self.assertEqual(platform.shown, [])

    async def test_revoked_permission_blocks_delivery(self):
        services, platform, _ = _services(key=None)
        await services.subscriptions.subscribe()
        platform.set_permission(BrowserPermission.DENIED)
        self.assertEqual(await services.dispatcher.notify(self._record()), DeliveryChannel.NONE)
        self.assertEqual(platform.shown, [])
