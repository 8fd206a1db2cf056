"""
Management command to classify a vendor operation failure.

Usage:
    python manage.py track_error bulk_claim_orders "Request failed with status 500" \
        --order-id 123 --vendor-id 7 --vendor-name "Acme"
    python manage.py track_error mark_ready "invalid payload" --dry-run
"""

import asyncio
import json

from django.core.management.base import BaseCommand, CommandError

from apps.notifications.classifier import ErrorClassifier, ErrorContext, TrackedError, TrackingSession
from apps.notifications.stores import LocalNotificationStore


class Command(BaseCommand):
    help = "Classify an operation failure and record it as a notification"

    def add_arguments(self, parser):
        parser.add_argument("operation", help="Operation identifier, e.g. claim_order")
        parser.add_argument("message", help="Raw error message")
        parser.add_argument("--type", dest="error_type", help="Explicit error type (skips inference)")
        parser.add_argument("--code", help="Explicit error code")
        parser.add_argument("--order-id")
        parser.add_argument("--vendor-id", type=int)
        parser.add_argument("--vendor-name", default="")
        parser.add_argument("--dry-run", action="store_true", help="Print the classification only")

    def handle(self, *args, **options):
        error = TrackedError(
            message=options["message"], type=options["error_type"], code=options["code"]
        )
        context = ErrorContext(order_id=options["order_id"], component="cli")
        session = TrackingSession(vendor_id=options["vendor_id"], vendor_name=options["vendor_name"])
        classifier = ErrorClassifier(LocalNotificationStore(actor="cli"), session=session, enabled=True)

        draft = classifier.classify(options["operation"], error, context)
        if options["dry_run"]:
            self.stdout.write(json.dumps(draft.to_dict(), indent=2, default=str))
            return

        if not session.is_identified:
            raise CommandError("--vendor-id and --vendor-name are required to record a notification")

        asyncio.run(classifier.track(options["operation"], error, context))
        self.stdout.write(self.style.SUCCESS(f"Tracked {draft.severity} {draft.type}: {draft.title}"))
