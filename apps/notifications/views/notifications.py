"""
Notification store API endpoints.

GET  /notifications/                 list (page, limit, status, type, severity, search)
POST /notifications/                 create a classified notification
GET  /notifications/stats/           aggregate counts
GET  /notifications/<id>/            detail
POST /notifications/<id>/resolve/    {"resolution_notes": "..."}
POST /notifications/<id>/dismiss/    {"reason": "..."}
"""

import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.notifications.dtos import NotificationDraft, NotificationQuery
from apps.notifications.services import (
    InvalidTransition,
    NotificationNotFound,
    NotificationService,
    to_record,
)
from apps.notifications.views._mixins import ApiAuthMixin

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _int_param(value, default: int | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@method_decorator(csrf_exempt, name="dispatch")
class NotificationListView(ApiAuthMixin, View):
    """List notifications (administrators) or create one (any authenticated caller)."""

    def get(self, request):
        if not request.is_service_call and not request.user.is_staff:
            return self.error_response("Administrator access required", status=403)

        default_limit = int(getattr(settings, "NOTIFICATIONS_PAGE_SIZE", 20))
        query = NotificationQuery(
            page=max(1, _int_param(request.GET.get("page"), 1)),
            limit=min(MAX_PAGE_SIZE, max(1, _int_param(request.GET.get("limit"), default_limit))),
            status=request.GET.get("status"),
            type=request.GET.get("type"),
            severity=request.GET.get("severity"),
            search=request.GET.get("search"),
        )
        page = NotificationService().list(query)
        return self.json_response(page.to_dict())

    def post(self, request):
        payload = self.parse_json(request)
        if payload is None:
            return self.error_response("Invalid JSON payload")

        missing = [key for key in ("type", "severity", "title") if not payload.get(key)]
        if missing:
            return self.error_response(f"Missing required fields: {', '.join(missing)}")

        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, dict):
            return self.error_response("metadata must be a JSON object")

        draft = NotificationDraft(
            type=str(payload["type"]),
            severity=str(payload["severity"]),
            title=str(payload["title"]),
            message=str(payload.get("message") or ""),
            order_id=str(payload["order_id"]) if payload.get("order_id") else None,
            vendor_id=_int_param(payload.get("vendor_id"), None),
            vendor_name=payload.get("vendor_name"),
            metadata=metadata,
            error_details=payload.get("error_details"),
        )
        try:
            notification = NotificationService().create(draft)
        except ValueError as e:
            return self.error_response(str(e))

        return self.json_response({"id": notification.pk}, status=201)


class NotificationStatsView(ApiAuthMixin, View):
    """Aggregate notification counts."""

    staff_required = True

    def get(self, request):
        return self.json_response(NotificationService().stats().to_dict())


class NotificationDetailView(ApiAuthMixin, View):
    """Single notification."""

    staff_required = True

    def get(self, request, notification_id):
        try:
            notification = NotificationService().get(notification_id)
        except NotificationNotFound as e:
            return self.error_response(str(e), status=404)
        return self.json_response(to_record(notification).to_dict())


@method_decorator(csrf_exempt, name="dispatch")
class NotificationResolveView(ApiAuthMixin, View):
    """Resolve a pending or in-progress notification."""

    staff_required = True

    def post(self, request, notification_id):
        payload = self.parse_json(request)
        if payload is None:
            return self.error_response("Invalid JSON payload")

        notes = str(payload.get("resolution_notes") or payload.get("notes") or "")
        try:
            notification = NotificationService().resolve(
                notification_id, notes, actor=self.actor_name(request)
            )
        except NotificationNotFound as e:
            return self.error_response(str(e), status=404)
        except InvalidTransition as e:
            return self.error_response(str(e), status=409)
        except ValueError as e:
            return self.error_response(str(e))

        return self.json_response(to_record(notification).to_dict())


@method_decorator(csrf_exempt, name="dispatch")
class NotificationDismissView(ApiAuthMixin, View):
    """Dismiss a notification."""

    staff_required = True

    def post(self, request, notification_id):
        payload = self.parse_json(request)
        if payload is None:
            return self.error_response("Invalid JSON payload")

        reason = str(payload.get("reason") or "") or getattr(
            settings, "NOTIFICATIONS_DEFAULT_DISMISS_REASON", "Dismissed by admin"
        )
        try:
            notification = NotificationService().dismiss(
                notification_id, reason, actor=self.actor_name(request)
            )
        except NotificationNotFound as e:
            return self.error_response(str(e), status=404)
        except InvalidTransition as e:
            return self.error_response(str(e), status=409)

        return self.json_response(to_record(notification).to_dict())
