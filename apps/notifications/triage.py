"""
Triage presenter for the notification list.

Holds the view state of the admin notification panel (filters, pagination,
the open detail view, the resolution notes buffer) and drives resolve /
dismiss transitions through the notification store.

Invariants:
- Any filter change resets pagination to page 1 before the next fetch.
- Each list fetch is numbered; a response older than the latest request is
  discarded, so a slow earlier fetch can never overwrite a newer one.
- At most one detail view is open, and only for a pending notification.
- Local state changes only after the store confirms a transition.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable

from django.conf import settings

from apps.notifications.dtos import ALL, NotificationPage, NotificationQuery, NotificationRecord
from apps.notifications.stores import NotificationStore
from apps.notifications.taxonomy import NotificationStatus

logger = logging.getLogger(__name__)


@dataclass
class TriageFilters:
    status: str = ALL
    type: str = ALL
    severity: str = ALL
    search: str = ""


class TriagePresenter:
    """
    Paginated, filterable view over persisted notifications.

    Usage:
        presenter = TriagePresenter(store, on_stats_changed=refresh_counts)
        await presenter.apply_filters(severity="critical")
        presenter.open_detail(presenter.notifications[0])
        presenter.set_resolution_notes("Label regenerated")
        await presenter.resolve(presenter.selected.id)
    """

    def __init__(
        self,
        store: NotificationStore,
        on_stats_changed: Callable[[], Awaitable[Any] | Any] | None = None,
        page_size: int | None = None,
        default_dismiss_reason: str | None = None,
    ):
        self.store = store
        self.on_stats_changed = on_stats_changed
        if page_size is None:
            page_size = int(getattr(settings, "NOTIFICATIONS_PAGE_SIZE", 20))
        if default_dismiss_reason is None:
            default_dismiss_reason = getattr(
                settings, "NOTIFICATIONS_DEFAULT_DISMISS_REASON", "Dismissed by admin"
            )
        self.limit = page_size
        self.default_dismiss_reason = default_dismiss_reason

        self.filters = TriageFilters()
        self.page = 1
        self.notifications: list[NotificationRecord] = []
        self.total = 0
        self.pages = 1
        self.loading = False
        self.error: str | None = None

        self.selected: NotificationRecord | None = None
        self.resolution_notes = ""

        self._sequence = 0

    # --- Listing ---

    def query(self) -> NotificationQuery:
        return NotificationQuery(
            page=self.page,
            limit=self.limit,
            status=self.filters.status,
            type=self.filters.type,
            severity=self.filters.severity,
            search=self.filters.search,
        )

    async def list(self) -> NotificationPage | None:
        """Fetch the current page; returns None if failed or superseded."""
        self._sequence += 1
        sequence = self._sequence
        query = self.query()
        self.loading = True

        try:
            page = await self.store.list_notifications(query)
        except Exception:
            logger.exception("Error fetching notifications")
            if sequence == self._sequence:
                self.loading = False
                self.error = "Failed to fetch notifications"
            return None

        if sequence != self._sequence:
            logger.debug(f"Discarding stale notification list response #{sequence}")
            return None

        self.notifications = list(page.items)
        self.total = page.total
        self.pages = page.pages
        self.loading = False
        self.error = None
        return page

    def set_filters(self, **changes: str | None) -> bool:
        """Update filters; any actual change resets the page to 1."""
        valid = {f.name for f in fields(TriageFilters)}
        changed = False
        for name, value in changes.items():
            if name not in valid:
                raise ValueError(f"Unknown filter: {name}")
            if value is None:
                value = "" if name == "search" else ALL
            if getattr(self.filters, name) != value:
                setattr(self.filters, name, value)
                changed = True
        if changed:
            self.page = 1
        return changed

    async def apply_filters(self, **changes: str | None) -> NotificationPage | None:
        self.set_filters(**changes)
        return await self.list()

    async def clear_filters(self) -> NotificationPage | None:
        return await self.apply_filters(status=ALL, type=ALL, severity=ALL, search="")

    async def go_to_page(self, page: int) -> NotificationPage | None:
        self.page = max(1, min(int(page), max(1, self.pages)))
        return await self.list()

    async def refresh(self) -> NotificationPage | None:
        return await self.list()

    # --- Detail view ---

    def open_detail(self, notification: NotificationRecord) -> bool:
        """Open the detail view; only pending notifications can be opened."""
        if notification.status != NotificationStatus.PENDING:
            return False
        if self.selected is None or self.selected.id != notification.id:
            self.resolution_notes = ""
        self.selected = notification
        return True

    def close_detail(self) -> None:
        self.selected = None
        self.resolution_notes = ""

    def set_resolution_notes(self, notes: str) -> None:
        self.resolution_notes = notes

    # --- Transitions ---

    async def resolve(self, notification_id: int, notes: str | None = None) -> bool:
        """Resolve a notification with notes (defaults to the notes buffer).

        Blank notes are rejected without calling the store.
        """
        notes = self.resolution_notes if notes is None else notes
        if not notes or not notes.strip():
            return False

        try:
            await self.store.resolve_notification(notification_id, notes.strip())
        except Exception:
            logger.exception(f"Error resolving notification {notification_id}")
            self.error = "Failed to resolve notification"
            return False

        self.resolution_notes = ""
        self.selected = None
        await self.list()
        await self._stats_changed()
        return True

    async def dismiss(self, notification_id: int, reason: str | None = None) -> bool:
        """Dismiss a pending notification; the detail view need not be open.

        The notification must be on the loaded page or selected, so its
        pending status can be checked first.
        """
        known = self._find(notification_id)
        if known is None:
            logger.warning(f"Notification {notification_id} is not loaded, refusing to dismiss")
            return False
        if known.status != NotificationStatus.PENDING:
            return False

        reason = reason if reason and reason.strip() else self.default_dismiss_reason
        try:
            await self.store.dismiss_notification(notification_id, reason)
        except Exception:
            logger.exception(f"Error dismissing notification {notification_id}")
            self.error = "Failed to dismiss notification"
            return False

        if self.selected is not None and self.selected.id == notification_id:
            self.close_detail()
        await self.list()
        await self._stats_changed()
        return True

    def _find(self, notification_id: int) -> NotificationRecord | None:
        if self.selected is not None and self.selected.id == notification_id:
            return self.selected
        for notification in self.notifications:
            if notification.id == notification_id:
                return notification
        return None

    async def _stats_changed(self) -> None:
        if self.on_stats_changed is None:
            return
        try:
            result = self.on_stats_changed()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Stats refresh callback failed")
