"""
Push subscription registry: one row per admin browser endpoint.
"""

from django.conf import settings
from django.db import models


class PushSubscription(models.Model):
    """
    A push endpoint registered by an administrator's browser.

    `enabled` is the admin's delivery preference; browser permission stays
    authoritative on the client and is never stored here.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="push_subscriptions",
    )
    endpoint = models.URLField(max_length=500)
    p256dh = models.CharField(max_length=255, help_text="Client public key (base64).")
    auth = models.CharField(max_length=255, help_text="Client auth secret (base64).")
    user_agent = models.CharField(max_length=500, blank=True, default="")
    enabled = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "endpoint"], name="push_unique_user_endpoint"),
        ]

    def __str__(self):
        state = "enabled" if self.enabled else "disabled"
        return f"{self.user} ({state})"

    def to_subscription_info(self) -> dict:
        """Shape expected by push delivery libraries."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
