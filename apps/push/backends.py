"""Push subscription backend contract and its HTTP adapter.

The backend stores which admins have registered a push endpoint and hands
out the VAPID public key. A missing key means the push channel is
unavailable and clients fall back to local alerts.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from apps.notifications.stores import JsonApiClient
from apps.push.platform import PushEndpoint
from apps.push.vapid import encode_key

logger = logging.getLogger(__name__)


@dataclass
class PushSubscriptionData:
    """Subscription payload sent to the backend (keys base64-encoded)."""

    endpoint: str
    p256dh: str
    auth: str

    @classmethod
    def from_endpoint(cls, endpoint: PushEndpoint) -> PushSubscriptionData:
        return cls(
            endpoint=endpoint.endpoint,
            p256dh=encode_key(endpoint.p256dh),
            auth=encode_key(endpoint.auth),
        )

    def to_dict(self) -> dict:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class PushBackend(ABC):
    """Abstract push subscription backend."""

    @abstractmethod
    async def get_vapid_public_key(self) -> str | None:
        """VAPID public key, or None when push is not configured."""

    @abstractmethod
    async def get_subscription_status(self) -> bool:
        """Whether the current admin has an active subscription."""

    @abstractmethod
    async def subscribe(self, data: PushSubscriptionData) -> None:
        """Register a push endpoint for the current admin."""

    @abstractmethod
    async def unsubscribe(self) -> None:
        """Remove the current admin's push registration."""


class HttpPushBackend(PushBackend):
    """Push backend backed by the push JSON API."""

    def __init__(self, client: JsonApiClient | None = None):
        self.client = client or JsonApiClient()

    async def get_vapid_public_key(self) -> str | None:
        payload = await self.client.arequest("GET", "/push/vapid-key/")
        return (payload.get("data") or {}).get("public_key") or None

    async def get_subscription_status(self) -> bool:
        payload = await self.client.arequest("GET", "/push/status/")
        return bool((payload.get("data") or {}).get("is_subscribed"))

    async def subscribe(self, data: PushSubscriptionData) -> None:
        await self.client.arequest("POST", "/push/subscribe/", body=data.to_dict())

    async def unsubscribe(self) -> None:
        await self.client.arequest("POST", "/push/unsubscribe/", body={})
