"""Shared mixins for the JSON API views."""

import hmac
import json
import logging
from typing import Any

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class JSONResponseMixin:
    """Mixin for JSON responses in the {"status": ..., "data": ...} envelope."""

    def json_response(self, data: Any, status: int = 200) -> JsonResponse:
        return JsonResponse({"status": "success", "data": data}, status=status)

    def error_response(self, message: str, status: int = 400) -> JsonResponse:
        return JsonResponse({"status": "error", "message": message}, status=status)

    def parse_json(self, request) -> dict[str, Any] | None:
        """Decode a JSON object body; returns None when the body is invalid."""
        if not request.body:
            return {}
        try:
            payload = json.loads(request.body)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON payload: {e}")
            return None
        return payload if isinstance(payload, dict) else None


class ApiAuthMixin(JSONResponseMixin):
    """
    Authenticate API callers.

    Accepted credentials:
    - a logged-in session user
    - `Authorization: Bearer <NOTIFICATIONS_API_TOKEN>` for service callers

    Set `staff_required = True` on views reserved for administrators.
    """

    staff_required = False

    def dispatch(self, request, *args, **kwargs):
        if self._has_service_token(request):
            request.is_service_call = True
            return super().dispatch(request, *args, **kwargs)

        request.is_service_call = False
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return self.error_response("Authentication required", status=401)
        if self.staff_required and not user.is_staff:
            return self.error_response("Administrator access required", status=403)
        return super().dispatch(request, *args, **kwargs)

    def actor_name(self, request) -> str:
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return user.get_username()
        return "service" if getattr(request, "is_service_call", False) else ""

    @staticmethod
    def _has_service_token(request) -> bool:
        token = getattr(settings, "NOTIFICATIONS_API_TOKEN", "")
        header = request.headers.get("Authorization", "")
        if not token or not header.startswith("Bearer "):
            return False
        return hmac.compare_digest(header[len("Bearer ") :], token)
