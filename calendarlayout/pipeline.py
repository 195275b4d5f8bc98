"""Month layout pipeline.

Runs one full layout pass over a set of events for the visible weeks:

    filter -> expand recurrences -> per week: assign rows -> slice -> overflow

Every pass is a pure function of its inputs; nothing is cached between calls.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from .calendar_grid import is_event_in_range, week_ranges_for_month
from .config import LayoutSettings, RowStrategy
from .datetime_utils import DateLike
from .models import CellDimensions, DateRange, OverflowRecord, RecurringEvent, Slot, SlotAssignment
from .normalizer import event_bounds
from .overflow import build_overflow_records, calculate_cell_capacity
from .recurrence import RecurrenceExpander
from .row_assigner import EventSlotAssigner
from .week_slicer import assign_continuous_rows, build_week_slots

logger = logging.getLogger(__name__)


def expansion_window(event: RecurringEvent, visible: DateRange) -> DateRange:
    """Widen ``visible`` backwards by one template duration.

    Occurrences starting up to one duration before the first visible day still
    run into it.
    """
    start, end = event_bounds(event)
    return DateRange(start=visible.start - (end - start), end=visible.end)


@dataclass
class WeekLayout:
    """Positioned slots and row assignments of one visible week."""

    week_index: int
    week_range: DateRange
    slots: list[Slot] = field(default_factory=list)
    assignments: list[SlotAssignment] = field(default_factory=list)

    @property
    def max_row(self) -> int:
        """Highest row index used by any slot, 0 for an empty week."""
        return max((slot.row_index for slot in self.slots), default=0)

    def expanded_height(self, settings: LayoutSettings) -> int:
        """Height needed to show every row when the week is expanded."""
        rows = self.max_row + 1
        return settings.cell_header_height + rows * settings.row_height

    def has_overflow(self, min_height: float, settings: Optional[LayoutSettings] = None) -> bool:
        """Whether the week needs more room than a collapsed row provides."""
        return self.expanded_height(settings or LayoutSettings()) > min_height

    def week_height(self, settings: LayoutSettings, expanded: bool) -> Optional[int]:
        """Explicit row height when expanded; None leaves the collapsed minimum."""
        if not expanded:
            return None
        return max(self.expanded_height(settings), settings.min_week_row_height)


@dataclass
class MonthLayout:
    """Result of a layout pass over the visible weeks."""

    weeks: list[WeekLayout]
    overflow: list[OverflowRecord]
    cell_capacity: int

    @property
    def slots(self) -> list[Slot]:
        return [slot for week in self.weeks for slot in week.slots]

    def overflow_for_week(self, week_index: int) -> list[OverflowRecord]:
        return [record for record in self.overflow if record.week_index == week_index]


class MonthLayoutPipeline:
    """Lays out events across a sequence of week rows.

    Args:
        settings: Geometry, row strategy and expansion limits
        expander: Recurrence expander; built from ``settings`` when omitted
    """

    def __init__(
        self,
        settings: Optional[LayoutSettings] = None,
        expander: Optional[RecurrenceExpander] = None,
    ):
        self.settings = settings or LayoutSettings()
        self.expander = expander or RecurrenceExpander(self.settings)

    def layout_month(
        self,
        events: Iterable[Any],
        view_date: DateLike,
        cell_dimensions: Optional[CellDimensions] = None,
    ) -> MonthLayout:
        """Lay out the padded month grid containing ``view_date``."""
        week_ranges = week_ranges_for_month(view_date, self.settings.week_starts_on)
        return self.layout_weeks(events, week_ranges, cell_dimensions)

    def layout_weeks(
        self,
        events: Iterable[Any],
        week_ranges: Sequence[DateRange],
        cell_dimensions: Optional[CellDimensions] = None,
    ) -> MonthLayout:
        """Lay out events over explicit week ranges.

        Args:
            events: Timed, all-day and recurring events in any order
            week_ranges: Consecutive weeks, each first day 00:00 to last day end of day
            cell_dimensions: Measured day cell size; without it the capacity
                follows ``settings.visible_event_rows``

        Returns:
            MonthLayout with one WeekLayout per range and the overflow records
        """
        if cell_dimensions is not None:
            cell_capacity = calculate_cell_capacity(cell_dimensions.height, self.settings)
        else:
            cell_capacity = calculate_cell_capacity(self.settings.min_week_row_height, self.settings)

        if not week_ranges:
            return MonthLayout(weeks=[], overflow=[], cell_capacity=cell_capacity)

        visible = DateRange(start=week_ranges[0].start, end=week_ranges[-1].end)
        candidates = 0
        expanded: list[Any] = []
        for event in events:
            if isinstance(event, RecurringEvent):
                window = expansion_window(event, visible)
                if is_event_in_range(event, window):
                    candidates += 1
                    expanded.extend(self.expander.expand(event, window))
            elif is_event_in_range(event, visible):
                candidates += 1
                expanded.append(event)

        weeks: list[WeekLayout] = []
        overflow: list[OverflowRecord] = []
        for index, week_range in enumerate(week_ranges):
            week_events = [event for event in expanded if is_event_in_range(event, week_range)]
            week = self.layout_week(index, week_events, week_range)
            weeks.append(week)
            overflow.extend(build_overflow_records(index, week.assignments, cell_capacity))

        logger.debug(
            "Layout pass: %d events (%d after expansion) over %d weeks, capacity=%d, %d overflowing days",
            candidates,
            len(expanded),
            len(weeks),
            cell_capacity,
            len(overflow),
        )
        return MonthLayout(weeks=weeks, overflow=overflow, cell_capacity=cell_capacity)

    def layout_week(self, week_index: int, events: Sequence[Any], week_range: DateRange) -> WeekLayout:
        """Assign rows with the configured strategy and position the week's slots."""
        if self.settings.row_strategy == RowStrategy.CONTINUOUS:
            assignments = assign_continuous_rows(events, week_range)
        else:
            assignments = EventSlotAssigner().assign_slots(events, week_range.start)

        slots = build_week_slots(assignments, week_range, self.settings)
        return WeekLayout(week_index=week_index, week_range=week_range, slots=slots, assignments=assignments)
