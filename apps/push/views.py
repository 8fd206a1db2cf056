"""
Push subscription API endpoints.

GET  /push/vapid-key/     {"public_key": str | null}
GET  /push/status/        {"is_subscribed": bool}
POST /push/subscribe/     {"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}
POST /push/unsubscribe/
GET  /push/stats/         admin subscription counts
"""

import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.notifications.views._mixins import ApiAuthMixin
from apps.push.services import PushSubscriptionService

logger = logging.getLogger(__name__)


class AdminSessionMixin(ApiAuthMixin):
    """Subscriptions belong to a logged-in administrator, never to a service token."""

    staff_required = True

    def session_user(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return user


class VapidKeyView(ApiAuthMixin, View):
    def get(self, request):
        key = getattr(settings, "PUSH_VAPID_PUBLIC_KEY", "") or None
        return self.json_response({"public_key": key})


class PushStatusView(AdminSessionMixin, View):
    def get(self, request):
        user = self.session_user(request)
        if user is None:
            return self.error_response("Administrator session required", status=403)
        return self.json_response({"is_subscribed": PushSubscriptionService().is_subscribed(user)})


@method_decorator(csrf_exempt, name="dispatch")
class PushSubscribeView(AdminSessionMixin, View):
    def post(self, request):
        user = self.session_user(request)
        if user is None:
            return self.error_response("Administrator session required", status=403)

        payload = self.parse_json(request)
        if payload is None:
            return self.error_response("Invalid JSON payload")
        if not isinstance(payload.get("keys") or {}, dict):
            return self.error_response("keys must be a JSON object")

        try:
            subscription = PushSubscriptionService().subscribe(
                user, payload, user_agent=request.headers.get("User-Agent", "")
            )
        except ValueError as e:
            return self.error_response(str(e))
        return self.json_response({"id": subscription.pk, "is_subscribed": True}, status=201)


@method_decorator(csrf_exempt, name="dispatch")
class PushUnsubscribeView(AdminSessionMixin, View):
    def post(self, request):
        user = self.session_user(request)
        if user is None:
            return self.error_response("Administrator session required", status=403)
        removed = PushSubscriptionService().unsubscribe(user)
        return self.json_response({"removed": removed, "is_subscribed": False})


class PushStatsView(ApiAuthMixin, View):
    staff_required = True

    def get(self, request):
        return self.json_response(PushSubscriptionService().stats().to_dict())
