"""
Admin push subscription state machine.

States (`SubscriptionState`):

    UNSUPPORTED
    PERMISSION_DEFAULT --request_permission--> PERMISSION_DENIED | GRANTED_UNSUBSCRIBED
    GRANTED_UNSUBSCRIBED --subscribe--> GRANTED_SUBSCRIBED
    GRANTED_SUBSCRIBED --unsubscribe--> GRANTED_UNSUBSCRIBED

`subscribe()` registers a push endpoint when a VAPID key is available and
otherwise enables the local fallback channel (permission-only
subscription). Every failure leaves the manager in a non-subscribed state
that `reconcile_state` can explain.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from apps.push.backends import PushBackend, PushSubscriptionData
from apps.push.errors import DENIED_MESSAGE, UNSUPPORTED_MESSAGE, SubscriptionError, SubscriptionErrorKind
from apps.push.fallback import FallbackNotifier
from apps.push.permissions import BrowserPermission, SubscriptionState, reconcile_state
from apps.push.platform import NotificationPlatform
from apps.push.vapid import decode_vapid_key

logger = logging.getLogger(__name__)


class DeliveryChannel(Enum):
    """Which channel delivers alerts for a subscribed admin."""

    NONE = "none"
    PUSH = "push"
    LOCAL = "local"


@dataclass
class SubscriptionStatus:
    is_supported: bool
    is_subscribed: bool
    permission: str
    state: str
    channel: str
    push_available: bool

    def to_dict(self) -> dict:
        return {
            "is_supported": self.is_supported,
            "is_subscribed": self.is_subscribed,
            "permission": self.permission,
            "state": self.state,
            "channel": self.channel,
            "push_available": self.push_available,
        }


class SubscriptionManager:
    """Serializes permission and subscription transitions for one admin client."""

    def __init__(self, platform: NotificationPlatform, backend: PushBackend, fallback: FallbackNotifier):
        self.platform = platform
        self.backend = backend
        self.fallback = fallback
        self.state = SubscriptionState.UNSUPPORTED if not platform.is_supported() else SubscriptionState.PERMISSION_DEFAULT
        self.channel = DeliveryChannel.NONE
        self.vapid_public_key: str | None = None
        self._vapid_loaded = False
        self._backend_subscribed = False
        self._lock = asyncio.Lock()

    @property
    def is_subscribed(self) -> bool:
        return self.state.is_subscribed

    async def load(self) -> SubscriptionState:
        """Fetch the VAPID key and backend status, then reconcile with the browser."""
        async with self._lock:
            if not self.platform.is_supported():
                self._reset(SubscriptionState.UNSUPPORTED)
                return self.state

            await self._load_vapid_key(force=True)
            try:
                self._backend_subscribed = await self.backend.get_subscription_status()
            except Exception as e:
                # Browser permission takes precedence when the backend is unreachable.
                logger.warning(f"Push subscription status unavailable: {e}")
                self._backend_subscribed = False

            self.state = reconcile_state(self.platform.permission(), self._backend_subscribed)
            if self.state is SubscriptionState.GRANTED_SUBSCRIBED:
                has_endpoint = await self.platform.get_push_subscription() is not None
                if self.vapid_public_key and has_endpoint:
                    self.channel = DeliveryChannel.PUSH
                else:
                    self.channel = DeliveryChannel.LOCAL
                    self.fallback.is_enabled = True
            else:
                # Local alerts only run while the admin counts as subscribed.
                self.channel = DeliveryChannel.NONE
                self.fallback.disable()
            logger.info(f"Push subscription state loaded: {self.state.value} ({self.channel.value})")
            return self.state

    async def request_permission(self) -> SubscriptionState:
        if not self.platform.is_supported():
            self._reset(SubscriptionState.UNSUPPORTED)
            raise SubscriptionError(SubscriptionErrorKind.UNSUPPORTED, UNSUPPORTED_MESSAGE)
        async with self._lock:
            permission = await self.platform.request_permission()
            self.state = reconcile_state(permission, self.state.is_subscribed)
            if self.state is not SubscriptionState.GRANTED_SUBSCRIBED:
                self.channel = DeliveryChannel.NONE
            return self.state

    async def subscribe(self) -> SubscriptionState:
        """
        Subscribe the current admin.

        Raises:
            SubscriptionError: kind `unsupported`, `permission-denied` or
                `server-rejected`. The state is non-subscribed afterwards.
        """
        if not self.platform.is_supported():
            self._reset(SubscriptionState.UNSUPPORTED)
            raise SubscriptionError(SubscriptionErrorKind.UNSUPPORTED, UNSUPPORTED_MESSAGE)

        async with self._lock:
            permission = self.platform.permission()
            if permission is BrowserPermission.DENIED:
                self._reset(SubscriptionState.PERMISSION_DENIED)
                raise SubscriptionError(SubscriptionErrorKind.PERMISSION_DENIED, DENIED_MESSAGE)

            if self.state is SubscriptionState.GRANTED_SUBSCRIBED and permission is BrowserPermission.GRANTED:
                return self.state

            if permission is not BrowserPermission.GRANTED:
                permission = await self.platform.request_permission()
                if permission is not BrowserPermission.GRANTED:
                    self._reset(reconcile_state(permission, False))
                    raise SubscriptionError(SubscriptionErrorKind.PERMISSION_DENIED, DENIED_MESSAGE)

            key = await self._load_vapid_key()
            if not key or not self.platform.supports_push():
                logger.info("Push endpoint unavailable, enabling local alerts only")
                self.fallback.is_enabled = True
                self.channel = DeliveryChannel.LOCAL
                self.state = SubscriptionState.GRANTED_SUBSCRIBED
                return self.state

            try:
                endpoint = await self.platform.push_subscribe(decode_vapid_key(key))
                await self.backend.subscribe(PushSubscriptionData.from_endpoint(endpoint))
            except Exception as e:
                logger.error(f"Push subscription failed: {e}")
                await self._drop_endpoint()
                self._reset(SubscriptionState.GRANTED_UNSUBSCRIBED)
                raise SubscriptionError(SubscriptionErrorKind.SERVER_REJECTED, str(e) or "Failed to subscribe") from e

            self._backend_subscribed = True
            self.channel = DeliveryChannel.PUSH
            self.state = SubscriptionState.GRANTED_SUBSCRIBED
            logger.info("Subscribed to push notifications")
            return self.state

    async def unsubscribe(self) -> SubscriptionState:
        """
        Unsubscribe and disable local alerts.

        The manager ends non-subscribed even when the backend call fails; the
        failure is then raised as `server-rejected`.
        """
        async with self._lock:
            self.fallback.disable()
            if not self.platform.is_supported():
                self._reset(SubscriptionState.UNSUPPORTED)
                return self.state

            failure: Exception | None = None
            if self.channel is DeliveryChannel.PUSH or self._backend_subscribed:
                try:
                    await self.platform.push_unsubscribe()
                    await self.backend.unsubscribe()
                except Exception as e:
                    logger.error(f"Push unsubscribe failed: {e}")
                    failure = e

            self._backend_subscribed = False
            self._reset(reconcile_state(self.platform.permission(), False))
            if failure is not None:
                raise SubscriptionError(SubscriptionErrorKind.SERVER_REJECTED, str(failure) or "Failed to unsubscribe") from failure
            logger.info("Unsubscribed from notifications")
            return self.state

    def sync_permission(self) -> SubscriptionState:
        """Re-apply the browser permission, e.g. after it changed in browser settings."""
        if not self.platform.is_supported():
            self._reset(SubscriptionState.UNSUPPORTED)
            return self.state
        state = reconcile_state(self.platform.permission(), self.state.is_subscribed)
        if state.is_subscribed:
            self.state = state
        else:
            self._reset(state)
        return self.state

    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus(
            is_supported=self.platform.is_supported(),
            is_subscribed=self.state.is_subscribed,
            permission=self.platform.permission().value,
            state=self.state.value,
            channel=self.channel.value,
            push_available=bool(self.vapid_public_key) and self.platform.supports_push(),
        )

    async def _load_vapid_key(self, force: bool = False) -> str | None:
        if self._vapid_loaded and not force:
            return self.vapid_public_key
        try:
            self.vapid_public_key = await self.backend.get_vapid_public_key()
        except Exception as e:
            logger.warning(f"VAPID key unavailable: {e}")
            self.vapid_public_key = None
        self._vapid_loaded = True
        if not self.vapid_public_key:
            logger.info("VAPID key not configured, push notifications will be limited")
        return self.vapid_public_key

    async def _drop_endpoint(self) -> None:
        try:
            await self.platform.push_unsubscribe()
        except Exception:
            logger.exception("Failed to drop local push endpoint")

    def _reset(self, state: SubscriptionState) -> None:
        self.state = state
        self.channel = DeliveryChannel.NONE
