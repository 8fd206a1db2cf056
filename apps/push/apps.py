"""Django app configuration for the push app."""

from django.apps import AppConfig


class PushConfig(AppConfig):
    """Configuration for the Admin Push Delivery app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.push"
    verbose_name = "Admin Push Delivery"
