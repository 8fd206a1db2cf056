from datetime import timedelta

from django.test import SimpleTestCase
from django.utils import timezone

from apps.notifications.presentation import age_label, severity_badge, status_badge


class PresentationTests(SimpleTestCase):
    def test_severity_badges(self):
        self.assertEqual(severity_badge("critical").color, "red")
        self.assertEqual(severity_badge("critical").icon, "alert-triangle")
        self.assertEqual(severity_badge("low").icon, "info")
        self.assertEqual(severity_badge("bogus").color, "gray")

    def test_status_badges(self):
        self.assertEqual(status_badge("resolved").icon, "check-circle")
        self.assertEqual(status_badge("dismissed").color, "gray")
        self.assertEqual(status_badge("pending").color, "yellow")
        self.assertEqual(status_badge("other").icon, "clock")

    def test_badge_classes(self):
        self.assertIn("bg-red-100", severity_badge("critical").badge_classes)
        self.assertIn("border-l-blue-400", status_badge("in_progress").row_classes)

    def test_age_label(self):
        now = timezone.now()
        self.assertEqual(age_label(now - timedelta(minutes=5), now), "5\xa0minutes ago")
        self.assertEqual(age_label(None), "")
