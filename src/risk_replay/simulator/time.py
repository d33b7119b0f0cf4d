"""Calendar keys used to scope daily, weekly and monthly counters."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Sao_Paulo"


def trading_day_for(timestamp: datetime, timezone: str = DEFAULT_TIMEZONE) -> date:
    # Naive timestamps are taken as already local.
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(ZoneInfo(timezone)).date()


def week_start_for(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def day_key(timestamp: datetime, timezone: str = DEFAULT_TIMEZONE) -> str:
    return trading_day_for(timestamp, timezone).isoformat()


def week_key(timestamp: datetime, timezone: str = DEFAULT_TIMEZONE) -> str:
    return week_start_for(trading_day_for(timestamp, timezone)).isoformat()


def month_key(timestamp: datetime, timezone: str = DEFAULT_TIMEZONE) -> str:
    return trading_day_for(timestamp, timezone).strftime("%Y-%m")


def week_label(week_start: date) -> str:
    """Short label such as ``Jan 5-11`` or ``Jan 26-Feb 1``."""
    week_end = week_start + timedelta(days=6)
    start = f"{week_start:%b} {week_start.day}"
    if week_end.month == week_start.month:
        return f"{start}-{week_end.day}"
    return f"{start}-{week_end:%b} {week_end.day}"
