"""
Management command to deliver a notification to subscribed administrators.

Usage:
    python manage.py push_fan_out 42
    python manage.py push_fan_out 42 --gateway webhook
    python manage.py push_fan_out --stats
"""

from django.core.management.base import BaseCommand, CommandError

from apps.notifications.models import Notification
from apps.push.gateways import GATEWAY_REGISTRY, get_gateway
from apps.push.services import PushSubscriptionService


class Command(BaseCommand):
    help = "Fan a notification out to active push subscriptions (synchronously)"

    def add_arguments(self, parser):
        parser.add_argument("notification_id", nargs="?", type=int)
        parser.add_argument("--gateway", choices=sorted(GATEWAY_REGISTRY), help="Override PUSH_GATEWAY")
        parser.add_argument("--stats", action="store_true", help="Show subscription counts only")

    def handle(self, *args, **options):
        service = PushSubscriptionService()
        if options["stats"]:
            for key, value in service.stats().to_dict().items():
                self.stdout.write(f"{key:<22} {value}")
            return

        if options["notification_id"] is None:
            raise CommandError("notification_id is required unless --stats is given")
        try:
            notification = Notification.objects.get(pk=options["notification_id"])
        except Notification.DoesNotExist:
            raise CommandError(f"Notification {options['notification_id']} not found") from None

        result = service.deliver(notification, get_gateway(options["gateway"]))
        for error in result.errors:
            self.stderr.write(self.style.WARNING(error))
        self.stdout.write(
            self.style.SUCCESS(f"Delivered to {result.sent} subscription(s), {result.failed} failed")
        )
