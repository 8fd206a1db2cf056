"""Django app configuration for the notifications app."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for the Vendor Notifications app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
    verbose_name = "Vendor Notifications"

    def ready(self):
        # Connect creation signal that fans notifications out to push subscribers
        from apps.notifications import signals  # noqa: F401
