"""Calendar grid helpers: month/week day grids, view windows and range filtering."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

from .datetime_utils import (
    DAYS_IN_WEEK,
    DateLike,
    as_datetime,
    end_of_day,
    end_of_month,
    end_of_week,
    js_weekday,
    start_of_day,
    start_of_month,
    start_of_week,
)
from .models import DateRange, RecurringEvent, ViewMode
from .normalizer import normalize

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class CalendarDay:
    """A single day cell of the month grid."""

    date: datetime
    day: int
    is_current_month: bool
    is_previous_month: bool
    is_next_month: bool


@dataclass(frozen=True)
class CalendarWeek:
    """One row of the month grid."""

    days: tuple[CalendarDay, ...]

    @property
    def range(self) -> DateRange:
        """First day 00:00 to last day 23:59:59.999999."""
        return DateRange(start=start_of_day(self.days[0].date), end=end_of_day(self.days[-1].date))


@dataclass(frozen=True)
class WeekDay:
    date: datetime
    day_of_week: int
    day_name: str
    day_number: int
    is_today: bool


@dataclass(frozen=True)
class TimeSlot:
    """One row of the week time grid."""

    date: datetime
    hour: int
    minute: int
    day_of_week: int
    is_today: bool
    time_label: str


def get_month_calendar_grid(value: DateLike, week_starts_on: int = 0) -> list[CalendarWeek]:
    """Complete weeks covering the month of ``value``, padded with adjacent-month days.

    Example:
        January 2024 with Sunday weeks yields 5 weeks, Dec 31 2023 .. Feb 3 2024.
    """
    month_start = start_of_month(value)
    month_end = end_of_month(value)
    grid_start = start_of_week(month_start, week_starts_on)
    grid_end = end_of_week(month_end, week_starts_on)

    days: list[CalendarDay] = []
    current = grid_start
    while current <= grid_end:
        days.append(
            CalendarDay(
                date=current,
                day=current.day,
                is_current_month=current.month == month_start.month and current.year == month_start.year,
                is_previous_month=current < month_start,
                is_next_month=current > month_end,
            )
        )
        current += timedelta(days=1)

    return [
        CalendarWeek(days=tuple(days[i : i + DAYS_IN_WEEK])) for i in range(0, len(days), DAYS_IN_WEEK)
    ]


def week_ranges_for_month(value: DateLike, week_starts_on: int = 0) -> list[DateRange]:
    return [week.range for week in get_month_calendar_grid(value, week_starts_on)]


def get_week_days(
    value: DateLike, week_starts_on: int = 0, today: Optional[date] = None
) -> list[WeekDay]:
    """Seven days of the week containing ``value``."""
    today = today or date.today()
    week_start = start_of_week(value, week_starts_on)
    week: list[WeekDay] = []
    for offset in range(DAYS_IN_WEEK):
        day = week_start + timedelta(days=offset)
        weekday = js_weekday(day)
        week.append(
            WeekDay(
                date=day,
                day_of_week=weekday,
                day_name=DAY_NAMES[weekday],
                day_number=day.day,
                is_today=day.date() == today,
            )
        )
    return week


def get_week_time_slots(
    value: DateLike,
    slot_minutes: int = 30,
    week_starts_on: int = 0,
    today: Optional[date] = None,
) -> list[list[TimeSlot]]:
    """Time slots per day for the week grid, ``[7][24 * 60 / slot_minutes]``."""
    if slot_minutes <= 0 or (24 * 60) % slot_minutes:
        raise ValueError(f"slot_minutes must divide a day evenly, got {slot_minutes}")

    grid: list[list[TimeSlot]] = []
    for week_day in get_week_days(value, week_starts_on, today):
        slots = []
        for minute_of_day in range(0, 24 * 60, slot_minutes):
            hour, minute = divmod(minute_of_day, 60)
            slots.append(
                TimeSlot(
                    date=week_day.date.replace(hour=hour, minute=minute),
                    hour=hour,
                    minute=minute,
                    day_of_week=week_day.day_of_week,
                    is_today=week_day.is_today,
                    time_label=f"{hour:02d}:{minute:02d}",
                )
            )
        grid.append(slots)
    return grid


def get_view_range(value: DateLike, view_mode: ViewMode, week_starts_on: int = 0) -> DateRange:
    """Window of time visible in ``view_mode`` around ``value``.

    The month window covers the whole padded grid, not only the month itself.
    """
    mode = ViewMode(view_mode)
    if mode is ViewMode.MONTH:
        weeks = get_month_calendar_grid(value, week_starts_on)
        return DateRange(start=weeks[0].range.start, end=weeks[-1].range.end)
    if mode is ViewMode.WEEK:
        return DateRange(
            start=start_of_week(value, week_starts_on), end=end_of_week(value, week_starts_on)
        )
    return DateRange(start=start_of_day(value), end=end_of_day(value))


def is_event_in_range(event: Any, date_range: DateRange) -> bool:
    """Check whether an event touches a window.

    Recurring events are kept when the rule could produce an occurrence in the
    window: the series starts before the window ends and, if bounded by
    ``until``, does not end before it starts.
    """
    if isinstance(event, RecurringEvent):
        if as_datetime(event.start) > date_range.end:
            return False
        until = event.rule.until
        return until is None or until >= date_range.start

    event_range = normalize(event)
    return event_range.start <= date_range.end and event_range.end >= date_range.start
