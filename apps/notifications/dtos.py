"""
Data Transfer Objects for the notification store contract.

These are the shapes exchanged between the classifier / triage presenter and
whichever store backs them (the JSON API over HTTP, or the ORM in-process).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any

from apps.notifications.taxonomy import NotificationStatus

# Filter value meaning "no filter" in the dashboard selects.
ALL = "all"


@dataclass
class NotificationDraft:
    """A classified notification ready to be created by the store."""

    type: str
    severity: str
    title: str
    message: str
    order_id: str | None = None
    vendor_id: int | None = None
    vendor_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error_details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NotificationRecord:
    """A persisted notification as returned by the store."""

    id: int
    type: str
    severity: str
    title: str
    message: str
    status: str = NotificationStatus.PENDING.value
    created_at: datetime | str | None = None
    order_id: str = ""
    vendor_id: int | None = None
    vendor_name: str = ""
    resolved_by: str = ""
    resolved_at: datetime | str | None = None
    resolution_notes: str = ""
    dismissed_by: str = ""
    dismissed_at: datetime | str | None = None
    dismiss_reason: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    error_details: str = ""

    @property
    def is_pending(self) -> bool:
        return self.status == NotificationStatus.PENDING

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationRecord:
        """Build a record from an API payload, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        # Null text fields fall back to the dataclass defaults.
        for key in (
            "order_id",
            "vendor_name",
            "resolved_by",
            "resolution_notes",
            "dismissed_by",
            "dismiss_reason",
            "error_details",
            "metadata",
        ):
            if key in values and values[key] is None:
                del values[key]
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("created_at", "resolved_at", "dismissed_at"):
            if isinstance(data[key], datetime):
                data[key] = data[key].isoformat()
        return data


@dataclass
class NotificationQuery:
    """List query: pagination plus optional filters."""

    page: int = 1
    limit: int = 20
    status: str | None = None
    type: str | None = None
    severity: str | None = None
    search: str | None = None

    FILTER_FIELDS = ("status", "type", "severity", "search")

    def filters(self) -> dict[str, str]:
        """Active filters only ("all" and blank values are dropped)."""
        active = {}
        for name in self.FILTER_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            value = str(value).strip()
            if value and value != ALL:
                active[name] = value
        return active

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "limit": self.limit}
        params.update(self.filters())
        return params


@dataclass
class NotificationPage:
    """One page of notifications plus totals."""

    items: list[NotificationRecord] = field(default_factory=list)
    total: int = 0
    pages: int = 1
    page: int = 1

    @classmethod
    def build(
        cls, items: list[NotificationRecord], total: int, page: int, limit: int
    ) -> NotificationPage:
        pages = max(1, math.ceil(total / limit)) if limit > 0 else 1
        return cls(items=items, total=total, pages=pages, page=page)

    def to_dict(self) -> dict[str, Any]:
        return {
            "notifications": [item.to_dict() for item in self.items],
            "pagination": {"page": self.page, "pages": self.pages, "total": self.total},
        }


@dataclass
class NotificationStats:
    """Aggregate counts shown next to the notification list."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    dismissed: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    last_24h: int = 0
    last_7days: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationStats:
        known = {f.name for f in fields(cls)}
        return cls(**{k: int(v or 0) for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
