"""calendarlayout - month grid layout and recurrence engine.

Turns a list of calendar events into positioned, row-stacked slots for a month
grid: recurrence expansion, week slicing, row assignment and "+N more"
overflow. Hosts render the resulting geometry however they like.
"""

__version__ = "0.1.0"

import logging

from .config import LayoutSettings, RowStrategy, load_settings
from .exceptions import (
    CalendarLayoutError,
    ConfigurationError,
    DuplicateEventError,
    EventNotFoundError,
    RecurrenceError,
    RecurrenceExpansionError,
    RegistryError,
    UnsupportedEventTypeError,
    UnsupportedFrequencyError,
    ViewModeError,
)
from .logging_config import configure_logging, get_logging_status
from .models import (
    AllDayEvent,
    CellDimensions,
    DateRange,
    DayOfWeek,
    Frequency,
    OverflowRecord,
    RecurrenceRule,
    RecurringEvent,
    Resource,
    Slot,
    SlotPosition,
    SlotType,
    TimedEvent,
    ViewMode,
    parse_events,
)
from .pipeline import MonthLayout, MonthLayoutPipeline, WeekLayout
from .recurrence import RecurrenceExpander, expand_recurring_event
from .registry import EventRegistry
from .renderers import build_renderer_map, get_renderer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AllDayEvent",
    "CalendarLayoutError",
    "CellDimensions",
    "ConfigurationError",
    "DateRange",
    "DayOfWeek",
    "DuplicateEventError",
    "EventNotFoundError",
    "EventRegistry",
    "Frequency",
    "LayoutSettings",
    "MonthLayout",
    "MonthLayoutPipeline",
    "OverflowRecord",
    "RecurrenceError",
    "RecurrenceExpander",
    "RecurrenceExpansionError",
    "RecurrenceRule",
    "RecurringEvent",
    "RegistryError",
    "Resource",
    "RowStrategy",
    "Slot",
    "SlotPosition",
    "SlotType",
    "TimedEvent",
    "UnsupportedEventTypeError",
    "UnsupportedFrequencyError",
    "ViewMode",
    "ViewModeError",
    "WeekLayout",
    "__version__",
    "build_renderer_map",
    "configure_logging",
    "expand_recurring_event",
    "get_logging_status",
    "get_renderer",
    "load_settings",
    "parse_events",
]
