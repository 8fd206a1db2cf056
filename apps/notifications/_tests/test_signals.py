from unittest.mock import patch

from django.test import TestCase, override_settings

from apps.notifications.models import Notification


def _create():
    return Notification.objects.create(type="order_claim_error", severity="high", title="T")


class FanOutSignalTests(TestCase):
    @patch("apps.push.tasks.fan_out_notification.delay")
    def test_enqueued_after_commit(self, delay):
        with self.captureOnCommitCallbacks(execute=True):
            notification = _create()
        delay.assert_called_once_with(notification.pk)

    @patch("apps.push.tasks.fan_out_notification.delay")
    def test_not_enqueued_on_update(self, delay):
        notification = _create()
        with self.captureOnCommitCallbacks(execute=True):
            notification.start_progress()
        delay.assert_not_called()

    @override_settings(NOTIFICATIONS_FAN_OUT_ENABLED=False)
    @patch("apps.push.tasks.fan_out_notification.delay")
    def test_disabled(self, delay):
        with self.captureOnCommitCallbacks(execute=True):
            _create()
        delay.assert_not_called()

    @patch("apps.push.tasks.fan_out_notification.delay", side_effect=ConnectionError("broker down"))
    def test_broker_failure_is_logged(self, delay):
        with self.assertLogs("apps.notifications.signals", level="ERROR"):
            with self.captureOnCommitCallbacks(execute=True):
                notification = _create()
        self.assertTrue(Notification.objects.filter(pk=notification.pk).exists())
