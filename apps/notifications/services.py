"""
Notification store services.

Server-side implementation of the notification store: creation, filtered
listing, triage transitions and aggregate stats. Every status change is
validated against the allowed transitions and recorded in
NotificationHistory for audit.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.notifications.dtos import (
    NotificationDraft,
    NotificationPage,
    NotificationQuery,
    NotificationRecord,
    NotificationStats,
)
from apps.notifications.models import Notification, NotificationHistory
from apps.notifications.taxonomy import NotificationSeverity, NotificationStatus

logger = logging.getLogger(__name__)


class NotificationNotFound(Exception):
    """Raised when a notification id does not exist."""


class InvalidTransition(Exception):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, notification_id: int, current: str, target: str):
        super().__init__(
            f"Notification {notification_id} cannot move from '{current}' to '{target}'"
        )
        self.notification_id = notification_id
        self.current = current
        self.target = target


def to_record(notification: Notification) -> NotificationRecord:
    """Convert a Notification row to its transfer object."""
    return NotificationRecord(
        id=notification.pk,
        type=notification.type,
        severity=notification.severity,
        title=notification.title,
        message=notification.message,
        status=notification.status,
        created_at=notification.created_at,
        order_id=notification.order_id,
        vendor_id=notification.vendor_id,
        vendor_name=notification.vendor_name,
        resolved_by=notification.resolved_by,
        resolved_at=notification.resolved_at,
        resolution_notes=notification.resolution_notes,
        dismissed_by=notification.dismissed_by,
        dismissed_at=notification.dismissed_at,
        dismiss_reason=notification.dismiss_reason,
        metadata=notification.metadata or {},
        error_details=notification.error_details,
    )


class NotificationService:
    """
    ORM-backed notification store.

    Usage:
        service = NotificationService()
        notification = service.create(draft)
        page = service.list(NotificationQuery(status="pending"))
        service.resolve(notification.pk, "Re-synced courier label", actor="ops")
    """

    SEARCH_FIELDS = ("title", "message", "order_id", "vendor_name", "type")

    def create(self, draft: NotificationDraft) -> Notification:
        """Persist a classified notification."""
        if draft.severity not in NotificationSeverity.values:
            raise ValueError(f"Unknown severity: {draft.severity}")
        if not draft.title:
            raise ValueError("Notification title is required")

        with transaction.atomic():
            notification = Notification.objects.create(
                type=draft.type,
                severity=draft.severity,
                title=draft.title,
                message=draft.message or "",
                order_id=draft.order_id or "",
                vendor_id=draft.vendor_id,
                vendor_name=draft.vendor_name or "",
                metadata=draft.metadata or {},
                error_details=draft.error_details or "",
            )
            NotificationHistory.objects.create(
                notification=notification,
                event="created",
                new_status=notification.status,
                details={"type": notification.type, "severity": notification.severity},
            )

        logger.info(f"Created notification: {notification.title} ({notification.severity})")
        return notification

    def get(self, notification_id: int) -> Notification:
        try:
            return Notification.objects.get(pk=notification_id)
        except Notification.DoesNotExist as e:
            raise NotificationNotFound(f"Notification {notification_id} not found") from e

    def list(self, query: NotificationQuery) -> NotificationPage:
        """Return one page of notifications matching the query filters."""
        page = max(1, int(query.page or 1))
        limit = max(1, int(query.limit or 20))
        filters = query.filters()

        qs = Notification.objects.all()
        if "status" in filters:
            qs = qs.filter(status=filters["status"])
        if "type" in filters:
            qs = qs.filter(type=filters["type"])
        if "severity" in filters:
            qs = qs.filter(severity=filters["severity"])
        if "search" in filters:
            term = filters["search"]
            condition = Q()
            for name in self.SEARCH_FIELDS:
                condition |= Q(**{f"{name}__icontains": term})
            qs = qs.filter(condition)

        total = qs.count()
        offset = (page - 1) * limit
        items = [to_record(n) for n in qs.order_by("-created_at", "-id")[offset : offset + limit]]
        return NotificationPage.build(items, total=total, page=page, limit=limit)

    def start_progress(self, notification_id: int, actor: str = "") -> Notification:
        """Move a pending notification to in_progress."""
        with transaction.atomic():
            notification = self._lock(notification_id)
            old_status = self._check_transition(notification, NotificationStatus.IN_PROGRESS)
            notification.start_progress()
            self._record(notification, "in_progress", old_status, actor)
        return notification

    def resolve(self, notification_id: int, notes: str, actor: str = "") -> Notification:
        """Resolve a notification; non-empty resolution notes are required."""
        notes = (notes or "").strip()
        if not notes:
            raise ValueError("Resolution notes are required")

        with transaction.atomic():
            notification = self._lock(notification_id)
            old_status = self._check_transition(notification, NotificationStatus.RESOLVED)
            notification.resolve(notes, resolved_by=actor)
            self._record(notification, "resolved", old_status, actor, {"notes": notes})

        logger.info(f"Notification {notification_id} resolved by {actor or 'unknown'}")
        return notification

    def dismiss(self, notification_id: int, reason: str = "", actor: str = "") -> Notification:
        """Dismiss a notification with an optional reason."""
        reason = (reason or "").strip()

        with transaction.atomic():
            notification = self._lock(notification_id)
            old_status = self._check_transition(notification, NotificationStatus.DISMISSED)
            notification.dismiss(reason, dismissed_by=actor)
            self._record(notification, "dismissed", old_status, actor, {"reason": reason})

        logger.info(f"Notification {notification_id} dismissed by {actor or 'unknown'}")
        return notification

    def stats(self) -> NotificationStats:
        """Aggregate counts by status, severity and recency."""
        now = timezone.now()
        counts = Notification.objects.aggregate(
            total=Count("id"),
            pending=Count("id", filter=Q(status=NotificationStatus.PENDING)),
            in_progress=Count("id", filter=Q(status=NotificationStatus.IN_PROGRESS)),
            resolved=Count("id", filter=Q(status=NotificationStatus.RESOLVED)),
            dismissed=Count("id", filter=Q(status=NotificationStatus.DISMISSED)),
            critical=Count("id", filter=Q(severity=NotificationSeverity.CRITICAL)),
            high=Count("id", filter=Q(severity=NotificationSeverity.HIGH)),
            medium=Count("id", filter=Q(severity=NotificationSeverity.MEDIUM)),
            low=Count("id", filter=Q(severity=NotificationSeverity.LOW)),
            last_24h=Count("id", filter=Q(created_at__gte=now - timedelta(hours=24))),
            last_7days=Count("id", filter=Q(created_at__gte=now - timedelta(days=7))),
        )
        return NotificationStats.from_dict(counts)

    def _lock(self, notification_id: int) -> Notification:
        try:
            return Notification.objects.select_for_update().get(pk=notification_id)
        except Notification.DoesNotExist as e:
            raise NotificationNotFound(f"Notification {notification_id} not found") from e

    def _check_transition(self, notification: Notification, target: str) -> str:
        if not notification.can_transition_to(target):
            raise InvalidTransition(notification.pk, notification.status, target)
        return notification.status

    def _record(
        self,
        notification: Notification,
        event: str,
        old_status: str,
        actor: str,
        details: dict | None = None,
    ) -> None:
        NotificationHistory.objects.create(
            notification=notification,
            event=event,
            old_status=old_status,
            new_status=notification.status,
            actor=actor,
            details=details or {},
        )
