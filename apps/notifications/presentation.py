"""Rendering helpers: status/severity to icon and color.

Pure lookups with no side effects; unknown values render in neutral gray.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from django.utils.dateparse import parse_datetime
from django.utils.timesince import timesince


@dataclass(frozen=True)
class Badge:
    icon: str
    color: str

    @property
    def badge_classes(self) -> str:
        return f"bg-{self.color}-100 text-{self.color}-800 border-{self.color}-200"

    @property
    def row_classes(self) -> str:
        return (
            f"bg-{self.color}-50 border-l-4 border-l-{self.color}-400 hover:bg-{self.color}-100"
        )


NEUTRAL = Badge(icon="info", color="gray")

SEVERITY_BADGES = {
    "critical": Badge(icon="alert-triangle", color="red"),
    "high": Badge(icon="alert-triangle", color="orange"),
    "medium": Badge(icon="info", color="yellow"),
    "low": Badge(icon="info", color="blue"),
}

STATUS_BADGES = {
    "pending": Badge(icon="clock", color="yellow"),
    "in_progress": Badge(icon="clock", color="blue"),
    "resolved": Badge(icon="check-circle", color="green"),
    "dismissed": Badge(icon="x", color="gray"),
}


def severity_badge(severity: str) -> Badge:
    return SEVERITY_BADGES.get(severity, NEUTRAL)


def status_badge(status: str) -> Badge:
    return STATUS_BADGES.get(status, Badge(icon="clock", color="gray"))


def age_label(created_at: datetime | str | None, now: datetime | None = None) -> str:
    """Human "5 minutes ago" label for a creation timestamp."""
    if isinstance(created_at, str):
        created_at = parse_datetime(created_at)
    if created_at is None:
        return ""
    return f"{timesince(created_at, now)} ago"
