"""Client platform abstraction (browser / OS notification surface).

The subscription manager and fallback notifier never touch a browser API
directly; they go through a `NotificationPlatform`. `HeadlessPlatform` is an
in-memory implementation used by management commands and tests.

Public API:
- AlertOptions
- ShownAlert
- PushEndpoint
- NotificationPlatform
- HeadlessPlatform
"""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

from apps.push.permissions import BrowserPermission

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/icon-192x192.png"
DEFAULT_BADGE = "/icon-72x72.png"


@dataclass
class AlertOptions:
    """Display options for a local alert."""

    body: str = ""
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_BADGE
    tag: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    require_interaction: bool = False
    silent: bool = False
    actions: list[dict[str, str]] = field(default_factory=list)


class ShownAlert:
    """Handle to an alert currently displayed by the platform."""

    def __init__(self, title: str, options: AlertOptions):
        self.title = title
        self.options = options
        self.closed = False
        self.on_click: Callable[[str], None] | None = None

    def close(self) -> None:
        self.closed = True

    def click(self, action: str = "") -> None:
        """Simulate or forward a click; `action` is the action button id, if any."""
        if self.on_click is not None:
            self.on_click(action)


@dataclass
class PushEndpoint:
    """A push manager subscription: endpoint URL plus client keys (raw bytes)."""

    endpoint: str
    p256dh: bytes
    auth: bytes


class NotificationPlatform(ABC):
    """Abstract notification surface of the client."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Whether local notifications are available at all."""

    @abstractmethod
    def supports_push(self) -> bool:
        """Whether a push manager (service worker + push API) is available."""

    @abstractmethod
    def permission(self) -> BrowserPermission:
        """Current notification permission."""

    @abstractmethod
    async def request_permission(self) -> BrowserPermission:
        """Prompt for permission; returns the resulting permission."""

    @abstractmethod
    async def push_subscribe(self, application_server_key: bytes) -> PushEndpoint:
        """Create a push subscription for the given application server key."""

    @abstractmethod
    async def push_unsubscribe(self) -> bool:
        """Drop the current push subscription; True if one was removed."""

    @abstractmethod
    async def get_push_subscription(self) -> PushEndpoint | None:
        """Existing push subscription, if any."""

    @abstractmethod
    def show(self, title: str, options: AlertOptions) -> ShownAlert:
        """Display an alert and return its handle."""

    @abstractmethod
    def focus_window(self) -> None:
        """Bring the application window to the front."""

    @abstractmethod
    def open_window(self, url: str) -> None:
        """Open (or focus) a window at the given URL."""


class HeadlessPlatform(NotificationPlatform):
    """
    In-memory platform.

    Permission prompts resolve to `prompt_result`. Shown alerts, focus and
    open-window requests are recorded for inspection.
    """

    def __init__(
        self,
        permission: BrowserPermission = BrowserPermission.DEFAULT,
        prompt_result: BrowserPermission = BrowserPermission.GRANTED,
        supported: bool = True,
        push_supported: bool = True,
        endpoint_base: str = "https://push.example.invalid/send/",
    ):
        self._permission = permission
        self.prompt_result = prompt_result
        self.supported = supported
        self.push_supported = push_supported
        self.endpoint_base = endpoint_base
        self.subscription: PushEndpoint | None = None
        self.shown: list[ShownAlert] = []
        self.focus_count = 0
        self.opened_urls: list[str] = []

    def is_supported(self) -> bool:
        return self.supported

    def supports_push(self) -> bool:
        return self.supported and self.push_supported

    def permission(self) -> BrowserPermission:
        if not self.supported:
            return BrowserPermission.DENIED
        return self._permission

    def set_permission(self, permission: BrowserPermission) -> None:
        """Simulate the user changing permission in browser settings."""
        self._permission = permission

    async def request_permission(self) -> BrowserPermission:
        if not self.supported:
            return BrowserPermission.DENIED
        # Browsers only prompt from the default state.
        if self._permission is BrowserPermission.DEFAULT:
            self._permission = self.prompt_result
        logger.debug(f"Notification permission: {self._permission.value}")
        return self._permission

    async def push_subscribe(self, application_server_key: bytes) -> PushEndpoint:
        if not self.supports_push():
            raise RuntimeError("Push notifications are not supported")
        if self._permission is not BrowserPermission.GRANTED:
            raise PermissionError("Notification permission denied")
        if self.subscription is None:
            self.subscription = PushEndpoint(
                endpoint=f"{self.endpoint_base}{secrets.token_urlsafe(16)}",
                p256dh=b"\x04" + secrets.token_bytes(64),
                auth=secrets.token_bytes(16),
            )
        return self.subscription

    async def push_unsubscribe(self) -> bool:
        removed = self.subscription is not None
        self.subscription = None
        return removed

    async def get_push_subscription(self) -> PushEndpoint | None:
        return self.subscription

    def show(self, title: str, options: AlertOptions) -> ShownAlert:
        alert = ShownAlert(title, options)
        self.shown.append(alert)
        return alert

    def focus_window(self) -> None:
        self.focus_count += 1

    def open_window(self, url: str) -> None:
        self.opened_urls.append(url)
