"""Retention policies deciding when a soft-deleted item may be purged.

An item's deletion time is its ``last_updated`` stamp: soft-deleted items
accept no further mutations, so the stamp is frozen at the delete.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from app.config import Settings
from app.models.equipment import Equipment


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class RetentionPolicy(Protocol):
    def purge_due_at(self, last_updated: datetime) -> datetime: ...


@dataclass(frozen=True)
class FixedWindowPolicy:
    days: int = 3

    def purge_due_at(self, last_updated: datetime) -> datetime:
        return as_utc(last_updated) + timedelta(days=self.days)


@dataclass(frozen=True)
class WeeklyCutoffPolicy:
    """Purge at the first ``weekday``/``at`` after deletion, e.g. the coming Sunday 23:59."""

    weekday: int = 6
    at: time = time(23, 59)
    tz: tzinfo = field(default=UTC)

    def purge_due_at(self, last_updated: datetime) -> datetime:
        local = as_utc(last_updated).astimezone(self.tz)
        days_ahead = (self.weekday - local.weekday()) % 7
        due = datetime.combine(local.date() + timedelta(days=days_ahead), self.at, tzinfo=self.tz)
        if due <= local:
            due += timedelta(days=7)
        return due.astimezone(UTC)


def is_expired(policy: RetentionPolicy, last_updated: datetime, now: datetime) -> bool:
    return as_utc(now) >= policy.purge_due_at(last_updated)


def select_expired(
    items: list[Equipment], policy: RetentionPolicy, now: datetime
) -> list[Equipment]:
    return [i for i in items if i.is_deleted and is_expired(policy, i.last_updated, now)]


def time_remaining(policy: RetentionPolicy, last_updated: datetime, now: datetime) -> str:
    """Human label for the deleted-items view."""
    left = (policy.purge_due_at(last_updated) - as_utc(now)).total_seconds()
    if left <= 0:
        return "Eligible for cleanup"
    day = 24 * 60 * 60
    if left >= day:
        days = math.ceil(left / day)
        return f"{days} day{'s' if days > 1 else ''} remaining"
    hours = math.ceil(left / 3600)
    return f"{hours} hour{'s' if hours > 1 else ''} remaining"


def policy_from_settings(settings: Settings) -> RetentionPolicy:
    if settings.retention_policy == "weekly_cutoff":
        hour, minute = (int(part) for part in settings.cleanup_time.split(":"))
        return WeeklyCutoffPolicy(
            weekday=settings.cleanup_weekday,
            at=time(hour, minute),
            tz=ZoneInfo(settings.cleanup_timezone),
        )
    return FixedWindowPolicy(days=settings.retention_days)
