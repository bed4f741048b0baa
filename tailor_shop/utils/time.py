"""Time zone and calendar window helpers.

Timestamps are stored in UTC. Anything that reasons about calendar days (due
dates, report day buckets, week boundaries) first converts to the configured
reporting time zone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from tailor_shop.core.config import settings


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def local_tz() -> tzinfo:
    """Return the configured reporting time zone."""
    return _zone(settings.app_timezone)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    return datetime.now(local_tz())


def local_today() -> date:
    return local_now().date()


def to_local(value: datetime) -> datetime:
    """Convert a datetime to local time; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(local_tz())


def to_utc(value: datetime) -> datetime:
    """Convert to aware UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local_date(value: date | datetime) -> date:
    """Return the local calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return to_local(value).date()
    return value


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=local_tz())


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=local_tz())


def day_window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Return inclusive aware bounds covering every local day in the range."""
    return start_of_day(start_date), end_of_day(end_date)


def week_window(reference: datetime) -> tuple[datetime, datetime]:
    """Return Monday 00:00:00 through Sunday 23:59:59.999999 of the reference week."""
    local_day = to_local_date(reference)
    monday = local_day - timedelta(days=local_day.weekday())
    return day_window(monday, monday + timedelta(days=6))


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return day_window(first, next_first - timedelta(days=1))
