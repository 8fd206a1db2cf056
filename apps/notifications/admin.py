"""Admin configuration for notification models."""

from django.conf import settings
from django.contrib import admin
from django.db import models as db_models
from django.utils.html import format_html
from django_json_widget.widgets import JSONEditorWidget
from django_object_actions import DjangoObjectActions
from django_object_actions import action as object_action

from apps.notifications.models import Notification, NotificationHistory
from apps.notifications.presentation import severity_badge, status_badge
from apps.notifications.services import InvalidTransition, NotificationService
from apps.notifications.taxonomy import NotificationStatus
from config.admin import prettify_json

ADMIN_RESOLUTION_NOTE = "Resolved from the admin console"

BADGE_HEX = {
    "red": "#dc3545",
    "orange": "#fd7e14",
    "yellow": "#ffc107",
    "blue": "#17a2b8",
    "green": "#28a745",
    "gray": "#6c757d",
}


def _badge_html(color: str, label: str):
    return format_html(
        '<span style="background-color: {}; color: white; padding: 3px 8px; '
        'border-radius: 3px; font-size: 11px;">{}</span>',
        BADGE_HEX.get(color, BADGE_HEX["gray"]),
        label.upper(),
    )


class NotificationHistoryInline(admin.TabularInline):
    """Inline display of notification status history."""

    model = NotificationHistory
    extra = 0
    readonly_fields = ["event", "old_status", "new_status", "actor", "details", "created_at"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(DjangoObjectActions, admin.ModelAdmin):
    """Admin for Notification model."""

    list_display = [
        "title",
        "severity_display",
        "status_display",
        "type",
        "order_id",
        "vendor_name",
        "created_at",
    ]
    list_filter = ["status", "severity", "type"]
    search_fields = ["title", "message", "order_id", "vendor_name"]
    readonly_fields = [
        "created_at",
        "updated_at",
        "resolved_by",
        "resolved_at",
        "dismissed_by",
        "dismissed_at",
        "pretty_error_details",
    ]
    date_hierarchy = "created_at"
    inlines = [NotificationHistoryInline]
    formfield_overrides = {db_models.JSONField: {"widget": JSONEditorWidget}}
    actions = ["dismiss_selected"]
    change_actions = ["start_progress", "resolve_notification", "dismiss_notification"]

    fieldsets = [
        (None, {"fields": ["title", "message", "type", "severity", "status"]}),
        ("Correlation", {"fields": ["order_id", "vendor_id", "vendor_name"]}),
        (
            "Triage",
            {
                "fields": [
                    "resolution_notes",
                    "resolved_by",
                    "resolved_at",
                    "dismiss_reason",
                    "dismissed_by",
                    "dismissed_at",
                ],
            },
        ),
        ("Diagnostics", {"fields": ["metadata", "pretty_error_details"], "classes": ["collapse"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]

    # Classification and triage outcome only change through the object actions.
    locked_fields = ["type", "severity", "status", "resolution_notes", "dismiss_reason"]

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly += [f for f in self.locked_fields if f not in readonly]
        return readonly

    def _default_reason(self):
        return getattr(settings, "NOTIFICATIONS_DEFAULT_DISMISS_REASON", "Dismissed by admin")

    @admin.action(description="Dismiss selected notifications")
    def dismiss_selected(self, request, queryset):
        service = NotificationService()
        count = 0
        for notification in queryset.filter(status=NotificationStatus.PENDING):
            service.dismiss(notification.pk, self._default_reason(), actor=request.user.get_username())
            count += 1
        self.message_user(request, f"{count} notification(s) dismissed.")

    @object_action(label="Start Progress", description="Mark this notification as in progress")
    def start_progress(self, request, obj):
        self._transition(request, obj, "start_progress")

    @object_action(label="Resolve", description="Resolve this notification")
    def resolve_notification(self, request, obj):
        notes = obj.resolution_notes or ADMIN_RESOLUTION_NOTE
        self._transition(request, obj, "resolve", notes)

    @object_action(label="Dismiss", description="Dismiss this notification")
    def dismiss_notification(self, request, obj):
        self._transition(request, obj, "dismiss", obj.dismiss_reason or self._default_reason())

    def _transition(self, request, obj, method: str, *args):
        try:
            getattr(NotificationService(), method)(obj.pk, *args, actor=request.user.get_username())
        except InvalidTransition:
            self.message_user(request, f"Not allowed while status is '{obj.status}'.", level="warning")
            return
        self.message_user(request, f"Notification '{obj.title}' updated.")

    @admin.display(description="Severity")
    def severity_display(self, obj):
        return _badge_html(severity_badge(obj.severity).color, obj.severity)

    @admin.display(description="Status")
    def status_display(self, obj):
        return _badge_html(status_badge(obj.status).color, obj.status)

    @admin.display(description="Error Details")
    def pretty_error_details(self, obj):
        return prettify_json(obj.error_details)
