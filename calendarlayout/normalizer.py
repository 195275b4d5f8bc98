"""Event normalization: every event variant to one canonical day range."""

import logging
from datetime import datetime

from .datetime_utils import days_between, end_of_day, start_of_day
from .models import AllDayEvent, DateRange, EventBase

logger = logging.getLogger(__name__)


def event_bounds(event: EventBase) -> tuple[datetime, datetime]:
    """Return the raw (start, end) of an event, preserving clock time.

    All-day events span from midnight of ``date`` to the last instant of
    ``end_date`` (or ``date`` when absent). Degenerate events whose end precedes
    their start are treated as zero-duration at their start.

    Args:
        event: Timed, all-day or recurring event

    Returns:
        Tuple of (start, end) datetimes
    """
    if isinstance(event, AllDayEvent):
        start = start_of_day(event.date)
        end = end_of_day(event.last_day)
    else:
        start = event.start  # type: ignore[attr-defined]
        end = event.end  # type: ignore[attr-defined]

    if end < start:
        logger.warning(
            "Event %s ends before it starts (%s < %s); treating as zero-duration",
            event.id,
            end.isoformat(),
            start.isoformat(),
        )
        end = start
    return start, end


def normalize(event: EventBase) -> DateRange:
    """Convert any event variant to its day-granular range.

    Timed and recurring events are floored to the start of their first day and
    ceiled to the end of their last day; all-day events cover ``date`` through
    ``end_date``. Pure function with no error cases.
    """
    start, end = event_bounds(event)
    return DateRange(start=start_of_day(start), end=end_of_day(end))


def span_days(event: EventBase) -> int:
    """Inclusive number of calendar days the event touches."""
    day_range = normalize(event)
    return days_between(day_range.start, day_range.end) + 1


def is_multi_day(event: EventBase) -> bool:
    return span_days(event) > 1
