import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        db_index=True,
                        help_text="Notification type tag derived from the failing operation.",
                        max_length=64,
                    ),
                ),
                (
                    "severity",
                    models.CharField(
                        choices=[
                            ("low", "Low"),
                            ("medium", "Medium"),
                            ("high", "High"),
                            ("critical", "Critical"),
                        ],
                        db_index=True,
                        default="medium",
                        max_length=20,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField(blank=True, default="")),
                (
                    "order_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Order the failure relates to, if any.",
                        max_length=64,
                    ),
                ),
                ("vendor_id", models.BigIntegerField(blank=True, db_index=True, null=True)),
                ("vendor_name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In progress"),
                            ("resolved", "Resolved"),
                            ("dismissed", "Dismissed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("resolved_by", models.CharField(blank=True, default="", max_length=150)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolution_notes", models.TextField(blank=True, default="")),
                ("dismissed_by", models.CharField(blank=True, default="", max_length=150)),
                ("dismissed_at", models.DateTimeField(blank=True, null=True)),
                ("dismiss_reason", models.TextField(blank=True, default="")),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Classification metadata (operation, error type/code, component, action).",
                    ),
                ),
                (
                    "error_details",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Serialized diagnostic blob: raw error, context and stack trace.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "severity"], name="notif_status_severity_idx"
                    ),
                    models.Index(fields=["type", "status"], name="notif_type_status_idx"),
                    models.Index(fields=["-created_at"], name="notif_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NotificationHistory",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "event",
                    models.CharField(
                        help_text="Event type (e.g., 'created', 'resolved', 'dismissed').",
                        max_length=50,
                    ),
                ),
                ("old_status", models.CharField(blank=True, default="", max_length=20)),
                ("new_status", models.CharField(blank=True, default="", max_length=20)),
                ("actor", models.CharField(blank=True, default="", max_length=150)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "notification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="notifications.notification",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "Notification histories",
            },
        ),
    ]
