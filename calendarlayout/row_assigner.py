"""Row assignment: greedy interval scheduling of events into vertical lanes.

Two variants are provided:

- ``find_available_row`` / ``ContinuousRowAssigner`` place events one by one in
  input order, checking half-open day ranges per row. Used when slicing a single
  week's event lane.
- ``EventSlotAssigner`` is the month view "Tetris" assigner: longest events
  claim slots first, and occupancy is tracked per slot per day of the week.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .datetime_utils import DAYS_IN_WEEK, add_days, day_index, end_of_day, start_of_day
from .models import SlotAssignment
from .normalizer import event_bounds, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedRange:
    """Day range of a placed event as ``[start_day, exclusive_end_day)``."""

    start_day: datetime
    exclusive_end_day: datetime

    @classmethod
    def from_clamped(cls, clamped_start: datetime, clamped_end: datetime) -> "PlacedRange":
        return cls(start_of_day(clamped_start), add_days(start_of_day(clamped_end), 1))

    def overlaps(self, other: "PlacedRange") -> bool:
        """Half-open intersection; touching ranges do not overlap."""
        return self.start_day < other.exclusive_end_day and other.start_day < self.exclusive_end_day


def find_available_row(
    clamped_start: datetime,
    clamped_end: datetime,
    row_assignments: dict[int, list[PlacedRange]],
) -> int:
    """Find the first row where the event fits and register it there.

    Rows are scanned 0, 1, 2, ... and the first one whose placed ranges do not
    intersect the new event's day range wins. ``row_assignments`` is updated in
    place.

    Example:
        Dec 22-24 occupies [Dec 22, Dec 25); Dec 25 occupies [Dec 25, Dec 26).
        The two touch but do not overlap, so both land in row 0.

    Args:
        clamped_start: Event start clamped to the week
        clamped_end: Event end clamped to the week
        row_assignments: Row index -> placed ranges, mutated

    Returns:
        Selected row index
    """
    candidate = PlacedRange.from_clamped(clamped_start, clamped_end)
    row_index = 0
    while True:
        existing = row_assignments.get(row_index, [])
        if not any(candidate.overlaps(placed) for placed in existing):
            row_assignments[row_index] = [*existing, candidate]
            return row_index
        row_index += 1


class ContinuousRowAssigner:
    """Per-week row state for continuous assignment. Create one per week."""

    def __init__(self) -> None:
        self._rows: dict[int, list[PlacedRange]] = {}

    def assign(self, clamped_start: datetime, clamped_end: datetime) -> int:
        return find_available_row(clamped_start, clamped_end, self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)


class EventSlotAssigner:
    """Tetris-like slot assignment for the month view.

    Algorithm:
    1. Sort events by inclusive day span (longest first), then by start time
    2. For each event, find the lowest slot whose days are all free
    3. Mark those days occupied in that slot

    The occupancy grid grows without bound; limiting what is visible is the
    overflow partitioner's job.
    """

    def __init__(self, days_in_week: int = DAYS_IN_WEEK):
        self.days_in_week = days_in_week

    def assign_slots(self, events: Iterable[Any], week_start: datetime) -> list[SlotAssignment]:
        """Assign slots to the events of a single week.

        Events that do not intersect the week are skipped.

        Args:
            events: Events occurring in this week (any variant except unexpanded recurring)
            week_start: Midnight of the week's first day

        Returns:
            Assignments in placement order
        """
        occupancy: list[list[bool]] = []
        assignments: list[SlotAssignment] = []

        for event in self.sort_events(events):
            bounds = self.get_event_bounds(event, week_start)
            if bounds is None:
                logger.debug("Skipping event %s outside week of %s", event.id, week_start.date())
                continue
            day_start, day_end = bounds
            slot_index = self.find_available_slot(day_start, day_end, occupancy)
            self.mark_occupied(slot_index, day_start, day_end, occupancy)
            assignments.append(
                SlotAssignment(
                    event=event,
                    row_index=slot_index,
                    day_start=day_start,
                    day_end=day_end,
                    span_days=day_end - day_start + 1,
                )
            )

        logger.debug(
            "Assigned %d events to %d slots for week of %s",
            len(assignments),
            len(occupancy),
            week_start.date(),
        )
        return assignments

    @staticmethod
    def sort_events(events: Iterable[Any]) -> list[Any]:
        """Sort by day span descending, then start ascending. Stable for full ties."""

        def sort_key(event: Any) -> tuple[int, datetime]:
            day_range = normalize(event)
            span = (day_range.end.date() - day_range.start.date()).days + 1
            return -span, event_bounds(event)[0]

        return sorted(events, key=sort_key)

    def get_event_bounds(self, event: Any, week_start: datetime) -> Optional[tuple[int, int]]:
        """Day indices (0-6) of the event clamped to the week, or None if disjoint."""
        week_start = start_of_day(week_start)
        week_end = end_of_day(add_days(week_start, self.days_in_week - 1))
        day_range = normalize(event)
        if day_range.end < week_start or day_range.start > week_end:
            return None

        clamped_start = max(day_range.start, week_start)
        clamped_end = min(day_range.end, week_end)
        return day_index(week_start, clamped_start), day_index(week_start, clamped_end)

    def find_available_slot(
        self, day_start: int, day_end: int, occupancy: list[list[bool]]
    ) -> int:
        """Lowest slot whose days ``day_start..day_end`` are all free. Grows the grid lazily."""
        slot_index = 0
        while True:
            if slot_index == len(occupancy):
                occupancy.append([False] * self.days_in_week)
            if self.is_slot_available(occupancy[slot_index], day_start, day_end):
                return slot_index
            slot_index += 1

    @staticmethod
    def is_slot_available(row: Sequence[bool], day_start: int, day_end: int) -> bool:
        return not any(row[day_start : day_end + 1])

    def mark_occupied(
        self, slot_index: int, day_start: int, day_end: int, occupancy: list[list[bool]]
    ) -> None:
        while len(occupancy) <= slot_index:
            occupancy.append([False] * self.days_in_week)
        for day in range(day_start, day_end + 1):
            occupancy[slot_index][day] = True
