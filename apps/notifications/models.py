"""
Notification models for vendor operation failures and their triage history.
"""

from django.db import models
from django.utils import timezone

from apps.notifications.taxonomy import (
    NotificationSeverity,
    NotificationStatus,
    can_transition,
    is_terminal,
)


class Notification(models.Model):
    """
    A classified failure of a vendor operation, awaiting triage.

    Type and severity are assigned once by the classifier and never
    recomputed. Status moves pending → in_progress → resolved | dismissed.
    """

    # Classification
    type = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Notification type tag derived from the failing operation.",
    )
    severity = models.CharField(
        max_length=20,
        choices=NotificationSeverity.choices,
        default=NotificationSeverity.MEDIUM,
        db_index=True,
    )
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True, default="")

    # Correlation
    order_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Order the failure relates to, if any.",
    )
    vendor_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    vendor_name = models.CharField(max_length=255, blank=True, default="")

    # Triage
    status = models.CharField(
        max_length=20,
        choices=NotificationStatus.choices,
        default=NotificationStatus.PENDING,
        db_index=True,
    )
    resolved_by = models.CharField(max_length=150, blank=True, default="")
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolution_notes = models.TextField(blank=True, default="")
    dismissed_by = models.CharField(max_length=150, blank=True, default="")
    dismissed_at = models.DateTimeField(null=True, blank=True)
    dismiss_reason = models.TextField(blank=True, default="")

    # Diagnostics
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Classification metadata (operation, error type/code, component, action).",
    )
    error_details = models.TextField(
        blank=True,
        default="",
        help_text="Serialized diagnostic blob: raw error, context and stack trace.",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "severity"], name="notif_status_severity_idx"),
            models.Index(fields=["type", "status"], name="notif_type_status_idx"),
            models.Index(fields=["-created_at"], name="notif_created_idx"),
        ]

    def __str__(self):
        return f"[{self.severity}] {self.title} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == NotificationStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def can_transition_to(self, status: str) -> bool:
        return can_transition(self.status, status)

    def start_progress(self, save: bool = True):
        """Mark the notification as being worked on."""
        self.status = NotificationStatus.IN_PROGRESS
        if save:
            self.save(update_fields=["status", "updated_at"])

    def resolve(self, notes: str, resolved_by: str = "", save: bool = True):
        """Mark the notification as resolved with resolution notes."""
        self.status = NotificationStatus.RESOLVED
        self.resolution_notes = notes
        self.resolved_by = resolved_by
        self.resolved_at = timezone.now()
        if save:
            self.save(
                update_fields=[
                    "status",
                    "resolution_notes",
                    "resolved_by",
                    "resolved_at",
                    "updated_at",
                ]
            )

    def dismiss(self, reason: str, dismissed_by: str = "", save: bool = True):
        """Mark the notification as dismissed."""
        self.status = NotificationStatus.DISMISSED
        self.dismiss_reason = reason
        self.dismissed_by = dismissed_by
        self.dismissed_at = timezone.now()
        if save:
            self.save(
                update_fields=[
                    "status",
                    "dismiss_reason",
                    "dismissed_by",
                    "dismissed_at",
                    "updated_at",
                ]
            )


class NotificationHistory(models.Model):
    """
    Audit trail of status changes for a notification.
    """

    notification = models.ForeignKey(
        Notification,
        on_delete=models.CASCADE,
        related_name="history",
    )
    event = models.CharField(
        max_length=50,
        help_text="Event type (e.g., 'created', 'resolved', 'dismissed').",
    )
    old_status = models.CharField(max_length=20, blank=True, default="")
    new_status = models.CharField(max_length=20, blank=True, default="")
    actor = models.CharField(max_length=150, blank=True, default="")
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "Notification histories"

    def __str__(self):
        return f"{self.notification.title}: {self.event}"
