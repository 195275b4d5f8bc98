"""Day-granular datetime helpers for the layout engine.

All values are naive local-calendar datetimes; no timezone conversion happens
here. Aware datetimes are accepted by the millisecond helpers only, where they
are reduced to naive UTC so identifiers stay stable.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Union

DAYS_IN_WEEK = 7

_EPOCH = datetime(1970, 1, 1)
_ONE_MS = timedelta(milliseconds=1)

DateLike = Union[date, datetime]


def as_datetime(value: DateLike) -> datetime:
    """Promote a date to midnight; datetimes are returned unchanged."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def start_of_day(value: DateLike) -> datetime:
    """Return 00:00:00.000000 of the value's day."""
    return datetime.combine(as_datetime(value).date(), time.min)


def end_of_day(value: DateLike) -> datetime:
    """Return 23:59:59.999999 of the value's day."""
    return datetime.combine(as_datetime(value).date(), time.max)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def days_between(earlier: DateLike, later: DateLike) -> int:
    """Whole calendar days from ``earlier`` to ``later`` (negative if reversed)."""
    return (as_datetime(later).date() - as_datetime(earlier).date()).days


def day_index(week_start: DateLike, moment: DateLike) -> int:
    """Column of ``moment`` within the week beginning at ``week_start``."""
    return days_between(start_of_day(week_start), start_of_day(moment))


def js_weekday(value: DateLike) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return (as_datetime(value).weekday() + 1) % DAYS_IN_WEEK


def start_of_week(value: DateLike, week_starts_on: int = 0) -> datetime:
    """Midnight of the first day of the week containing ``value``.

    Args:
        value: Any moment in the target week
        week_starts_on: First column, 0 = Sunday .. 6 = Saturday
    """
    offset = (js_weekday(value) - week_starts_on) % DAYS_IN_WEEK
    return start_of_day(value) - timedelta(days=offset)


def end_of_week(value: DateLike, week_starts_on: int = 0) -> datetime:
    return end_of_day(start_of_week(value, week_starts_on) + timedelta(days=DAYS_IN_WEEK - 1))


def start_of_month(value: DateLike) -> datetime:
    return start_of_day(as_datetime(value).replace(day=1))


def end_of_month(value: DateLike) -> datetime:
    first = as_datetime(value).replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return end_of_day(next_month - timedelta(days=1))


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_epoch_millis(value: DateLike) -> int:
    """Milliseconds since the epoch, treating naive values as UTC wall time."""
    return (to_naive_utc(as_datetime(value)) - _EPOCH) // _ONE_MS
