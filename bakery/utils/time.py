"""Business-calendar time helpers.

All fulfillment dates are calendar dates in the business timezone, so every
"today" and cutoff comparison goes through these helpers.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from bakery.core.config import settings


def business_tz() -> ZoneInfo:
    """Return the configured business timezone."""
    return ZoneInfo(settings.business_timezone)


def business_now(tz: ZoneInfo | None = None) -> datetime:
    """Return the current instant expressed in the business timezone."""
    return datetime.now(timezone.utc).astimezone(tz or business_tz())


def to_business_time(value: datetime, tz: ZoneInfo) -> datetime:
    """Convert an instant to the business timezone; naive values are treated as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def day_of_week(value: date) -> int:
    """Return the weekday with 0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7


def parse_hhmm(value: str) -> time:
    """Parse an HH:MM string into a time, raising ValueError on bad input."""
    raw = str(value or "").strip()
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except ValueError as exc:
        raise ValueError("Time must be in HH:MM format") from exc


def format_hhmm(value: time | None) -> str | None:
    return value.strftime("%H:%M") if value is not None else None
