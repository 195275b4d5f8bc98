"""Data models for the calendar layout engine.

Input events and the Slot output are pydantic models. Intermediate records
produced during a layout pass are plain dataclasses.
"""

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class DayOfWeek(str, Enum):
    """Day names used by recurrence rules."""

    SUN = "Sun"
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"

    @property
    def index(self) -> int:
        """Calendar column index, 0 = Sunday."""
        return list(DayOfWeek).index(self)


class Frequency(str, Enum):
    """Recurrence frequencies supported by the expander."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SlotType(str, Enum):
    """How a sliced event relates to the boundaries of the week it is drawn in."""

    FULL = "full"
    FIRST = "first"
    LAST = "last"
    MIDDLE = "middle"


class ViewMode(str, Enum):
    """Calendar views with their own positioning strategy."""

    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    RESOURCE = "resource"


class DateRange(BaseModel):
    """Closed date-time window used for view queries and week bounds."""

    start: dt.datetime = Field(..., description="Window start")
    end: dt.datetime = Field(..., description="Window end")

    model_config = ConfigDict(frozen=True)

    def contains(self, moment: dt.datetime) -> bool:
        """Check if a moment lies inside the window (inclusive)."""
        return self.start <= moment <= self.end


class RecurrenceRule(BaseModel):
    """Recurrence rule compatible with the RFC 5545 RRULE subset the widget exposes.

    ``count`` and ``until`` are both optional stop conditions. When both are set the
    expander stops at whichever bound is reached first.
    """

    frequency: Frequency = Field(..., description="Recurrence frequency")
    interval: int = Field(default=1, ge=1, description="Interval between occurrences")
    count: Optional[int] = Field(default=None, ge=1, description="Maximum occurrences")
    until: Optional[dt.datetime] = Field(default=None, description="Last allowed occurrence start")
    by_day: Optional[list[DayOfWeek]] = Field(default=None, description="Weekdays (BYDAY)")
    by_month: Optional[list[int]] = Field(default=None, description="Months 1-12 (BYMONTH)")
    by_month_day: Optional[list[int]] = Field(
        default=None, description="Days of month, negative counts from month end (BYMONTHDAY)"
    )
    by_set_position: Optional[list[int]] = Field(
        default=None, description="Positions within the period set (BYSETPOS)"
    )
    week_start: Optional[DayOfWeek] = Field(default=None, description="First day of week (WKST)")

    @field_validator("by_month")
    @classmethod
    def _check_months(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is not None and any(month < 1 or month > 12 for month in value):
            raise ValueError("by_month values must be within 1..12")
        return value

    @field_validator("by_month_day")
    @classmethod
    def _check_month_days(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is not None and any(day == 0 or abs(day) > 31 for day in value):
            raise ValueError("by_month_day values must be within -31..-1 or 1..31")
        return value


class EventBase(BaseModel):
    """Fields shared by every event variant. Not geometry relevant."""

    id: str = Field(..., description="Event ID")
    title: str = Field(default="", description="Display title")
    description: Optional[str] = Field(default=None, description="Notes")
    tags: list[str] = Field(default_factory=list, description="Tags for filtering and styling")
    color: Optional[str] = Field(default=None, description="Event color")
    is_read_only: bool = Field(default=False, description="Event cannot be edited")
    is_blocked: bool = Field(default=False, description="Event is visually blocked")
    resource_id: Optional[str] = Field(default=None, description="Owning resource ID")
    metadata: Any = Field(default=None, description="Host-defined payload")

    @property
    def is_editable(self) -> bool:
        """Check if the interaction layer may drag or resize this event."""
        return not self.is_read_only and not self.is_blocked


class TimedEvent(EventBase):
    """Regular event with clock start and end."""

    type: Literal["event"] = "event"
    start: dt.datetime = Field(..., description="Start date and time")
    end: dt.datetime = Field(..., description="End date and time")

    # Set only on occurrences produced by the recurrence expander
    is_recurrence_instance: bool = Field(default=False, description="Generated from a rule")
    parent_id: Optional[str] = Field(default=None, description="ID of the recurring parent")
    occurrence_date: Optional[dt.datetime] = Field(
        default=None, description="Occurrence start as produced by the rule"
    )


class AllDayEvent(EventBase):
    """Event occupying whole days. ``end_date`` defaults to ``date``."""

    type: Literal["all-day"] = "all-day"
    date: dt.date = Field(..., description="First day")
    end_date: Optional[dt.date] = Field(default=None, description="Last day (inclusive)")

    @property
    def last_day(self) -> dt.date:
        """Inclusive last day of the event."""
        return self.end_date or self.date


class RecurringEvent(EventBase):
    """Recurring event. ``start``/``end`` describe the first occurrence."""

    type: Literal["recurrent"] = "recurrent"
    start: dt.datetime = Field(..., description="First occurrence start")
    end: dt.datetime = Field(..., description="First occurrence end")
    rule: RecurrenceRule = Field(..., description="Recurrence rule")
    exceptions: list[dt.datetime] = Field(
        default_factory=list, description="Occurrence starts to exclude"
    )


# An occurrence is a TimedEvent tagged as a recurrence instance
Occurrence = TimedEvent

AnyEvent = Annotated[Union[TimedEvent, AllDayEvent, RecurringEvent], Field(discriminator="type")]

_EVENT_LIST_ADAPTER: TypeAdapter[list[AnyEvent]] = TypeAdapter(list[AnyEvent])


def parse_events(data: list[dict[str, Any]]) -> list[Union[TimedEvent, AllDayEvent, RecurringEvent]]:
    """Validate plain mappings into typed events, dispatching on ``type``.

    Raises:
        pydantic.ValidationError: If any entry is malformed
    """
    return _EVENT_LIST_ADAPTER.validate_python(data)


class Resource(BaseModel):
    """Resource an event may belong to (room, person, machine)."""

    id: str = Field(..., description="Resource ID")
    title: str = Field(default="", description="Display name")
    color: Optional[str] = Field(default=None, description="Default color for its events")
    tags: list[str] = Field(default_factory=list)
    is_read_only: bool = False
    is_blocked: bool = False
    is_active: bool = True


class SlotPosition(BaseModel):
    """Slot geometry: vertical values in pixels, horizontal values in percent."""

    top: float = Field(..., description="Vertical offset in px")
    left: float = Field(..., description="Horizontal offset in % of the week")
    width: float = Field(..., description="Width in % of the week")
    height: float = Field(..., description="Height in px")


class Slot(BaseModel):
    """One positioned visual unit representing all or part of an event in a week."""

    id: str
    source_event_id: str
    start: dt.datetime
    end: dt.datetime
    position: SlotPosition
    z_index: int
    type: SlotType
    row_index: int
    color: str = ""
    draggable: bool = True
    resizable: bool = True

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class WeekSlice:
    """Result of clamping one event range to one week."""

    clamped_start: dt.datetime
    clamped_end: dt.datetime
    type: SlotType
    left: float
    width: float
    day_start: int
    day_end: int

    @property
    def span_days(self) -> int:
        return self.day_end - self.day_start + 1


@dataclass
class SlotAssignment:
    """Row assigned to an event within one week, as 0-6 day indices."""

    event: Any
    row_index: int
    day_start: int
    day_end: int
    span_days: int

    def covers(self, day_index: int) -> bool:
        return self.day_start <= day_index <= self.day_end


@dataclass
class PartitionResult:
    """Visible and overflowed slots of one day cell."""

    visible: list[Any]
    hidden_events: list[Any]
    show_all_mode: bool = False

    @property
    def hidden_count(self) -> int:
        return len(self.hidden_events)

    @property
    def overflowed(self) -> bool:
        return bool(self.hidden_events)


@dataclass
class OverflowRecord:
    """Data behind a "+N more" indicator for one day of one week."""

    week_index: int
    day_index: int
    count: int
    show_all_mode: bool
    hidden_events: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class CellDimensions:
    """Pixel size of one month grid cell as measured by the host."""

    width: float
    height: float
