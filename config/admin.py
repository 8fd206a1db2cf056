"""Custom admin site for the vendor ops console."""

import json

from django.contrib.admin import AdminSite
from django.utils.html import format_html


def prettify_json(value) -> str:
    """Render a JSON-serializable value as an indented <pre> block."""
    if value in (None, "", {}, []):
        return "-"
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return format_html("<pre>{}</pre>", value)
    return format_html(
        '<pre style="white-space: pre-wrap;">{}</pre>',
        json.dumps(value, indent=2, sort_keys=True, default=str),
    )


class OpsAdminSite(AdminSite):
    site_header = "Vendor Ops"
    site_title = "Vendor Ops"
    index_title = "Dashboard"

    def index(self, request, extra_context=None):
        extra_context = extra_context or {}
        extra_context.update(self._get_dashboard_context())
        return super().index(request, extra_context=extra_context)

    def _get_dashboard_context(self):
        from apps.notifications.services import NotificationService
        from apps.push.services import PushSubscriptionService

        return {
            "notification_stats": NotificationService().stats().to_dict(),
            "push_stats": PushSubscriptionService().stats().to_dict(),
        }
