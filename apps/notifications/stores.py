"""Notification store contract and its adapters.

The classifier and the triage presenter only talk to a `NotificationStore`.
Two adapters are provided:

- HttpNotificationStore: the JSON API exposed by `apps.notifications.views`
- LocalNotificationStore: the ORM-backed `NotificationService`, in-process

Public API:
- NotificationStore
- ApiError
- JsonApiClient
- HttpNotificationStore
- LocalNotificationStore
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any

from asgiref.sync import sync_to_async
from django.conf import settings

from apps.notifications.dtos import (
    NotificationDraft,
    NotificationPage,
    NotificationQuery,
    NotificationRecord,
    NotificationStats,
)

logger = logging.getLogger(__name__)


class NotificationStore(ABC):
    """Abstract persistence collaborator for notifications."""

    @abstractmethod
    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        """Return one page of notifications matching the query."""

    @abstractmethod
    async def create_notification(self, draft: NotificationDraft) -> int:
        """Persist a classified notification and return its id."""

    @abstractmethod
    async def resolve_notification(self, notification_id: int, notes: str) -> None:
        """Move a notification to resolved with the given notes."""

    @abstractmethod
    async def dismiss_notification(self, notification_id: int, reason: str) -> None:
        """Move a notification to dismissed with the given reason."""

    async def get_stats(self) -> NotificationStats:
        """Aggregate counts; stores without stats support report zeros."""
        return NotificationStats()


class ApiError(Exception):
    """Raised when the JSON API rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class JsonApiClient:
    """Minimal blocking JSON client built on urllib.

    Coroutine callers should use `arequest`, which runs the blocking call in a
    worker thread so the event loop is never blocked.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: int | None = None,
    ):
        if base_url is None:
            base_url = getattr(settings, "NOTIFICATIONS_API_BASE_URL", "")
        if token is None:
            token = getattr(settings, "NOTIFICATIONS_API_TOKEN", "")
        if timeout is None:
            timeout = int(getattr(settings, "NOTIFICATIONS_API_TIMEOUT", 30))
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        return url

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = self.build_url(path, params)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "VendorOps/1.0",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = urllib.request.Request(url, data=data, headers=headers, method=method)

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else str(e)
            logger.error(f"{method} {path} HTTP error {e.code}: {error_body}")
            raise ApiError(self._error_message(error_body), status_code=e.code) from e
        except urllib.error.URLError as e:
            logger.error(f"{method} {path} URL error: {e.reason}")
            raise ApiError(f"Failed to connect to {self.base_url}: {e.reason}") from e

        try:
            payload = json.loads(raw) if raw else {}
        except json.JSONDecodeError as e:
            raise ApiError(f"Invalid JSON response from {path}") from e

        if isinstance(payload, dict) and payload.get("status") == "error":
            raise ApiError(payload.get("message") or "Request failed")
        return payload

    async def arequest(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await asyncio.to_thread(self.request, method, path, params, body)

    @staticmethod
    def _error_message(error_body: str) -> str:
        try:
            parsed = json.loads(error_body)
        except json.JSONDecodeError:
            return error_body
        if isinstance(parsed, dict):
            return parsed.get("message") or parsed.get("error") or error_body
        return error_body


class HttpNotificationStore(NotificationStore):
    """Notification store backed by the notifications JSON API."""

    def __init__(self, client: JsonApiClient | None = None):
        self.client = client or JsonApiClient()

    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        payload = await self.client.arequest("GET", "/notifications/", params=query.to_params())
        data = payload.get("data") or {}
        pagination = data.get("pagination") or {}
        return NotificationPage(
            items=[NotificationRecord.from_dict(item) for item in data.get("notifications") or []],
            total=int(pagination.get("total") or 0),
            pages=int(pagination.get("pages") or 1),
            page=int(pagination.get("page") or query.page),
        )

    async def create_notification(self, draft: NotificationDraft) -> int:
        payload = await self.client.arequest("POST", "/notifications/", body=draft.to_dict())
        return int((payload.get("data") or {}).get("id"))

    async def resolve_notification(self, notification_id: int, notes: str) -> None:
        await self.client.arequest(
            "POST",
            f"/notifications/{notification_id}/resolve/",
            body={"resolution_notes": notes},
        )

    async def dismiss_notification(self, notification_id: int, reason: str) -> None:
        await self.client.arequest(
            "POST",
            f"/notifications/{notification_id}/dismiss/",
            body={"reason": reason},
        )

    async def get_stats(self) -> NotificationStats:
        payload = await self.client.arequest("GET", "/notifications/stats/")
        return NotificationStats.from_dict(payload.get("data") or {})


class LocalNotificationStore(NotificationStore):
    """Notification store that calls the ORM service directly.

    Used by management commands and in-process consumers. The actor is
    recorded on resolve/dismiss transitions.
    """

    def __init__(self, service=None, actor: str = ""):
        if service is None:
            from apps.notifications.services import NotificationService

            service = NotificationService()
        self.service = service
        self.actor = actor

    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        return await sync_to_async(self.service.list)(query)

    async def create_notification(self, draft: NotificationDraft) -> int:
        notification = await sync_to_async(self.service.create)(draft)
        return notification.pk

    async def resolve_notification(self, notification_id: int, notes: str) -> None:
        await sync_to_async(self.service.resolve)(notification_id, notes, actor=self.actor)

    async def dismiss_notification(self, notification_id: int, reason: str) -> None:
        await sync_to_async(self.service.dismiss)(notification_id, reason, actor=self.actor)

    async def get_stats(self) -> NotificationStats:
        return await sync_to_async(self.service.stats)()
