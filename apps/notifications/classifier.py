"""
Error classification for vendor operations.

Turns a raw failure from any vendor-facing business operation into a typed,
severity-ranked notification and submits it to the notification store.

Tracking is instrumentation: it never raises, and it never alters the
business error it observes. `tracked_call` re-raises the original exception
after tracking it.

Usage:
    classifier = ErrorClassifier(store)
    session = TrackingSession(vendor_id=42, vendor_name="Acme")
    await classifier.track("claim_order", exc, ErrorContext(order_id="123"), session=session)

    claim = classifier.tracked_call("claim_order", api.claim_order, session=session)
    await claim(order_id)
"""

from __future__ import annotations

import functools
import json
import logging
import re
import traceback
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Awaitable, Callable, TypeVar

from django.conf import settings
from django.utils import timezone

from apps.notifications.dtos import NotificationDraft
from apps.notifications.stores import NotificationStore
from apps.notifications.taxonomy import (
    CRITICAL_ERROR_TYPES,
    CRITICAL_OPERATIONS,
    DEFAULT_NOTIFICATION_TYPE,
    HIGH_ERROR_TYPES,
    HIGH_SEVERITY_OPERATIONS,
    OPERATION_DISPLAY_NAMES,
    OPERATION_TYPES,
    ErrorType,
    NotificationSeverity,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")

_CODE_PATTERN = re.compile(r"code[:\s]+(\w+)", re.IGNORECASE)


@dataclass
class TrackedError:
    """Normalized view of a raw failure."""

    message: str
    type: str | None = None
    code: str | int | None = None
    stack: str | None = None
    name: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> TrackedError:
        """Build a TrackedError from a Python exception.

        An exception may carry `error_type` and `code` attributes; when it
        does, they are taken as the explicit type and code.
        """
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            message=str(exc) or type(exc).__name__,
            type=getattr(exc, "error_type", None),
            code=getattr(exc, "code", None),
            stack=stack,
            name=type(exc).__name__,
        )

    @classmethod
    def coerce(cls, error: BaseException | TrackedError | dict[str, Any]) -> TrackedError:
        if isinstance(error, TrackedError):
            return error
        if isinstance(error, BaseException):
            return cls.from_exception(error)
        return cls(
            message=str(error.get("message") or ""),
            type=error.get("type"),
            code=error.get("code"),
            stack=error.get("stack"),
            name=str(error.get("name") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "code": self.code, "message": self.message, "stack": self.stack}


@dataclass
class ErrorContext:
    """Where and how the failing operation was invoked."""

    component: str | None = None
    action: str | None = None
    order_id: str | None = None
    order_ids: list[str] | None = None
    endpoint: str | None = None
    method: str | None = None
    status_code: int | None = None
    retry_count: int | None = None
    user_agent: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def coerce(cls, context: ErrorContext | dict[str, Any] | None) -> ErrorContext:
        """Accept a context object or a plain map (snake_case or camelCase keys)."""
        if context is None:
            return cls()
        if isinstance(context, ErrorContext):
            return context
        values = {}
        for key, value in context.items():
            name = _CONTEXT_ALIASES.get(key, key)
            if name in _CONTEXT_FIELDS:
                values[name] = value
        if values.get("order_id") is not None:
            values["order_id"] = str(values["order_id"])
        if values.get("order_ids") is not None:
            values["order_ids"] = [str(v) for v in values["order_ids"]]
        return cls(**values)


_CONTEXT_FIELDS = frozenset(f.name for f in fields(ErrorContext))
_CONTEXT_ALIASES = {
    "orderId": "order_id",
    "orderIds": "order_ids",
    "statusCode": "status_code",
    "retryCount": "retry_count",
    "userAgent": "user_agent",
}


@dataclass
class TrackingSession:
    """Identity of the acting vendor, plus the client environment snapshot."""

    vendor_id: int | str | None = None
    vendor_name: str | None = None
    user_agent: str = ""
    url: str = ""

    @property
    def is_identified(self) -> bool:
        return bool(self.vendor_id) and bool(self.vendor_name)


@dataclass
class ErrorEvent:
    """An operation failure, before it is classified."""

    operation: str
    error: TrackedError
    context: ErrorContext = field(default_factory=ErrorContext)


def infer_error_type(error: TrackedError) -> str:
    """Infer an error type from the error's name and message.

    First match wins: network, authentication, validation, timeout.
    """
    if error.type:
        return error.type

    name = (error.name or "").lower()
    message = (error.message or "").lower()

    if "network" in name or "fetch" in message or "network" in message:
        return ErrorType.NETWORK_ERROR.value
    if "auth" in name or "unauthorized" in message or "forbidden" in message:
        return ErrorType.AUTHENTICATION_ERROR.value
    if "validation" in name or "invalid" in message:
        return ErrorType.VALIDATION_ERROR.value
    if "timeout" in name or "timeout" in message:
        return ErrorType.TIMEOUT_ERROR.value
    return ErrorType.UNKNOWN_ERROR.value


def infer_error_code(error: TrackedError) -> str | int | None:
    """Explicit code wins; otherwise look for `code: <word>` in the message."""
    if error.code is not None:
        return error.code
    match = _CODE_PATTERN.search(error.message or "")
    if match:
        return match.group(1)
    return None


def classify_severity(operation: str, error_type: str, message: str) -> str:
    """Assign a severity; the first matching rule wins."""
    if error_type in CRITICAL_ERROR_TYPES:
        return NotificationSeverity.CRITICAL.value
    if error_type in HIGH_ERROR_TYPES:
        return NotificationSeverity.HIGH.value
    if operation in CRITICAL_OPERATIONS:
        return NotificationSeverity.CRITICAL.value
    if operation in HIGH_SEVERITY_OPERATIONS:
        return NotificationSeverity.HIGH.value

    text = (message or "").lower()
    if "critical" in text or "fatal" in text:
        return NotificationSeverity.CRITICAL.value
    if "failed" in text or "error" in text:
        return NotificationSeverity.HIGH.value
    return NotificationSeverity.MEDIUM.value


def notification_type_for(operation: str) -> str:
    return OPERATION_TYPES.get(operation, DEFAULT_NOTIFICATION_TYPE)


def build_title(operation: str, order_id: str | None = None) -> str:
    name = OPERATION_DISPLAY_NAMES.get(operation, (operation, operation))[0]
    order_info = f" - Order {order_id}" if order_id else ""
    return f"{name} Failed{order_info}"


def build_message(operation: str, error_message: str, order_id: str | None = None) -> str:
    name = OPERATION_DISPLAY_NAMES.get(operation, (operation, operation))[1]
    message = f"Vendor encountered an error during {name}"
    if order_id:
        message += f" for order {order_id}"
    return f"{message}. Error: {error_message}"


class ErrorClassifier:
    """
    Classifies vendor operation failures and submits them as notifications.

    Tracking is a silent no-op when disabled or when no identified session is
    available. Failures while tracking are logged and swallowed.
    """

    def __init__(
        self,
        store: NotificationStore,
        session: TrackingSession | None = None,
        enabled: bool | None = None,
    ):
        """
        Initialize the classifier.

        Args:
            store: Notification store that receives created notifications.
            session: Default session used when `track` is called without one.
            enabled: Override for settings.NOTIFICATIONS_TRACKING_ENABLED.
        """
        self.store = store
        self.session = session
        if enabled is None:
            enabled = bool(getattr(settings, "NOTIFICATIONS_TRACKING_ENABLED", True))
        self.enabled = enabled

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def update_session(self, session: TrackingSession | None) -> None:
        self.session = session

    def classify(
        self,
        operation: str,
        error: BaseException | TrackedError | dict[str, Any],
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> NotificationDraft:
        """Compose the notification for a failure without submitting it."""
        raw = TrackedError.coerce(error)
        context = ErrorContext.coerce(context)
        session = session or self.session or TrackingSession()

        tracked = replace(raw, type=infer_error_type(raw), code=infer_error_code(raw))
        timestamp = timezone.now().isoformat()

        full_context = context.to_dict()
        full_context["user_agent"] = session.user_agent
        full_context["url"] = session.url

        return NotificationDraft(
            type=notification_type_for(operation),
            severity=classify_severity(operation, tracked.type, tracked.message),
            title=build_title(operation, context.order_id),
            message=build_message(operation, tracked.message, context.order_id),
            order_id=context.order_id,
            vendor_id=_as_int(session.vendor_id),
            vendor_name=session.vendor_name,
            metadata={
                "operation": operation,
                "error_type": tracked.type,
                "error_code": tracked.code,
                "component": context.component,
                "action": context.action,
                "timestamp": timestamp,
            },
            error_details=json.dumps(
                {
                    "error": tracked.to_dict(),
                    "context": full_context,
                    "stack_trace": tracked.stack,
                    "captured_at": timestamp,
                },
                indent=2,
                default=str,
            ),
        )

    async def track(
        self,
        operation: str,
        error: BaseException | TrackedError | dict[str, Any],
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        """Classify a failure and create exactly one notification for it."""
        session = session or self.session
        if not self.enabled or session is None or not session.is_identified:
            return

        try:
            draft = self.classify(operation, error, context, session)
            logger.info(
                f"Tracking vendor error: {operation} "
                f"({draft.metadata['error_type']}, severity={draft.severity})"
            )
            await self.store.create_notification(draft)
        except Exception:
            logger.exception(f"Failed to track vendor error for operation {operation}")

    async def track_event(self, event: ErrorEvent, session: TrackingSession | None = None) -> None:
        await self.track(event.operation, event.error, event.context, session=session)

    async def track_api_error(
        self,
        operation: str,
        error: BaseException,
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        """Track a failed API call; the HTTP status becomes the error code."""
        context = ErrorContext.coerce(context)
        status_code = _status_code_of(error)
        tracked = TrackedError(
            type=ErrorType.API_ERROR.value,
            code=getattr(error, "code", None) or status_code,
            message=str(error) or "API request failed",
            stack=_format_stack(error),
            name=type(error).__name__,
        )
        if status_code is not None:
            context = replace(context, status_code=status_code)
        await self.track(operation, tracked, context, session=session)

    async def track_network_error(
        self,
        operation: str,
        error: BaseException,
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        context = ErrorContext.coerce(context)
        context = replace(context, retry_count=context.retry_count or 0)
        await self._track_typed(
            operation,
            error,
            ErrorType.NETWORK_ERROR.value,
            "Network request failed",
            context,
            session,
        )

    async def track_validation_error(
        self,
        operation: str,
        error: BaseException,
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        await self._track_typed(
            operation, error, ErrorType.VALIDATION_ERROR.value, "Validation failed", context, session
        )

    async def track_auth_error(
        self,
        operation: str,
        error: BaseException,
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        await self._track_typed(
            operation,
            error,
            ErrorType.AUTHENTICATION_ERROR.value,
            "Authentication failed",
            context,
            session,
            default_code="AUTH_ERROR",
        )

    async def track_file_error(
        self,
        operation: str,
        error: BaseException,
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> None:
        await self._track_typed(
            operation, error, ErrorType.FILE_ERROR.value, "File operation failed", context, session
        )

    async def _track_typed(
        self,
        operation: str,
        error: BaseException,
        error_type: str,
        default_message: str,
        context: ErrorContext | dict[str, Any] | None,
        session: TrackingSession | None,
        default_code: str | None = None,
    ) -> None:
        tracked = TrackedError(
            type=error_type,
            code=getattr(error, "code", None) or default_code or error_type,
            message=str(error) or default_message,
            stack=_format_stack(error),
            name=type(error).__name__,
        )
        await self.track(operation, tracked, context, session=session)

    def tracked_call(
        self,
        operation: str,
        func: Callable[..., Awaitable[R]],
        context: ErrorContext | dict[str, Any] | None = None,
        session: TrackingSession | None = None,
    ) -> Callable[..., Awaitable[R]]:
        """Wrap an async callable so failures are tracked and then re-raised."""

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                await self.track_api_error(operation, exc, context, session=session)
                raise

        return wrapper


def _status_code_of(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _as_int(value: int | str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
