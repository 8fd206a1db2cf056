"""Push delivery gateways.

A gateway hands one payload to one subscription endpoint. Encryption and the
push network protocol live behind the gateway; this project ships a logging
gateway (default) and a webhook gateway that forwards to an external relay.

Public API:
- DeliveryResult
- PushGateway
- GATEWAY_REGISTRY
- get_gateway
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    success: bool
    error: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


class PushGateway(ABC):
    """Abstract push delivery gateway."""

    name: str = "base"

    @abstractmethod
    def deliver(self, subscription: dict[str, Any], payload: dict[str, Any]) -> DeliveryResult:
        """Deliver `payload` to the endpoint described by `subscription`."""


class LoggingPushGateway(PushGateway):
    """Records deliveries in the log instead of contacting a push network."""

    name = "logging"

    def deliver(self, subscription: dict[str, Any], payload: dict[str, Any]) -> DeliveryResult:
        logger.info(f"Push '{payload.get('title', '')}' -> {subscription.get('endpoint', '')}")
        return DeliveryResult(success=True, metadata={"gateway": self.name})


class WebhookPushGateway(PushGateway):
    """POSTs {"subscription", "payload"} to a relay that speaks the push protocol."""

    name = "webhook"

    def __init__(self, endpoint: str | None = None, timeout: int | None = None):
        self.endpoint = endpoint if endpoint is not None else getattr(settings, "PUSH_GATEWAY_ENDPOINT", "")
        self.timeout = timeout or getattr(settings, "NOTIFICATIONS_API_TIMEOUT", 30)

    def deliver(self, subscription: dict[str, Any], payload: dict[str, Any]) -> DeliveryResult:
        if not self.endpoint.startswith(("http://", "https://")):
            return DeliveryResult(success=False, error="Invalid configuration (PUSH_GATEWAY_ENDPOINT required)")

        body = json.dumps({"subscription": subscription, "payload": payload}).encode("utf-8")
        request = urllib.request.Request(
            self.endpoint,
            data=body,
            headers={"Content-Type": "application/json", "User-Agent": "VendorOps/1.0"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status_code = response.getcode()
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else str(e)
            logger.error(f"Push relay HTTP error {e.code}: {error_body}")
            return DeliveryResult(success=False, error=f"HTTP error ({e.code}): {error_body}")
        except urllib.error.URLError as e:
            logger.error(f"Push relay unreachable: {e.reason}")
            return DeliveryResult(success=False, error=f"Connection error: {e.reason}")

        logger.info(f"Push relayed to {self.endpoint}: {status_code}")
        return DeliveryResult(success=True, metadata={"gateway": self.name, "status_code": status_code})


GATEWAY_REGISTRY: dict[str, type[PushGateway]] = {
    "logging": LoggingPushGateway,
    "webhook": WebhookPushGateway,
}


def get_gateway(name: str | None = None) -> PushGateway:
    """Instantiate the gateway named by `name` or `settings.PUSH_GATEWAY`."""
    name = name or getattr(settings, "PUSH_GATEWAY", "logging")
    try:
        gateway_class = GATEWAY_REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown push gateway: {name}") from None
    return gateway_class()
