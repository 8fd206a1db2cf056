"""
Management command to list notifications awaiting triage.

Usage:
    python manage.py list_notifications
    python manage.py list_notifications --status pending --severity critical
    python manage.py list_notifications --search "order 123" --page 2
"""

import asyncio

from django.core.management.base import BaseCommand

from apps.notifications.presentation import age_label
from apps.notifications.stores import LocalNotificationStore
from apps.notifications.triage import TriagePresenter


class Command(BaseCommand):
    help = "List vendor notifications with optional filters"

    def add_arguments(self, parser):
        parser.add_argument("--status", default="all", help="pending, in_progress, resolved, dismissed")
        parser.add_argument("--type", default="all", help="Notification type tag")
        parser.add_argument("--severity", default="all", help="low, medium, high, critical")
        parser.add_argument("--search", default="", help="Free-text search")
        parser.add_argument("--page", type=int, default=1)
        parser.add_argument("--stats", action="store_true", help="Also print aggregate counts")

    def handle(self, *args, **options):
        asyncio.run(self._run(options))

    async def _run(self, options):
        store = LocalNotificationStore()
        presenter = TriagePresenter(store)
        presenter.set_filters(
            status=options["status"],
            type=options["type"],
            severity=options["severity"],
            search=options["search"],
        )
        presenter.page = max(1, options["page"])
        page = await presenter.list()
        if page is None:
            self.stderr.write(self.style.ERROR(f"Failed to fetch notifications: {presenter.error}"))
            return

        self.stdout.write(
            self.style.SUCCESS(f"Notifications (page {page.page}/{page.pages}, {page.total} total)")
        )
        self.stdout.write("-" * 60)
        for item in page.items:
            self.stdout.write(
                f"#{item.id:<6} {item.severity.upper():<9} {item.status:<12} "
                f"{item.title} ({age_label(item.created_at)})"
            )
        if not page.items:
            self.stdout.write("No notifications found")

        if options["stats"]:
            stats = await store.get_stats()
            self.stdout.write("-" * 60)
            for key, value in stats.to_dict().items():
                self.stdout.write(f"{key:<12} {value}")
