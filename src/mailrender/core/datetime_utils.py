"""Datetime helpers shared across the renderers."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime

__all__ = [
    "ensure_utc",
    "rfc2425_datetime",
    "rfc2445_datetime",
    "rfc2445_now",
    "rfc2822_datetime",
]


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def rfc2822_datetime(value: datetime) -> str:
    """Format ``value`` for a ``Date:`` header, e.g. ``Tue, 04 Mar 2025 10:00:00 +0000``."""
    return format_datetime(ensure_utc(value))


def rfc2445_datetime(value: datetime) -> str:
    """Format ``value`` as an iCalendar UTC date-time."""
    return ensure_utc(value).strftime("%Y%m%dT%H%M%SZ")


def rfc2445_now() -> str:
    """Return the current time as an iCalendar UTC date-time."""
    return rfc2445_datetime(datetime.now(tz=UTC))


def rfc2425_datetime(value: datetime) -> str:
    """Format ``value`` as a vCard date-time."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")
