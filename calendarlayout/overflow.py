"""Capacity and overflow partitioning for month grid day cells."""

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Any, Optional, TypeVar

from .config import LayoutSettings
from .datetime_utils import DAYS_IN_WEEK
from .models import OverflowRecord, PartitionResult, SlotAssignment

logger = logging.getLogger(__name__)

T = TypeVar("T")


def calculate_max_visible_rows(container_height: float, slot_height: float, slot_gap: float) -> int:
    """Maximum number of full rows that fit in a container.

    n rows need ``n * slot_height + (n - 1) * slot_gap`` pixels, so
    ``n = floor((height + gap) / (slot_height + gap))``.

    Example:
        66px with 20px rows and a 2px gap fits 3 rows (0-20, 22-42, 44-64).

    Zero or negative heights are not an error and yield 0.
    """
    if container_height <= 0 or slot_height <= 0:
        return 0
    return max(0, math.floor((container_height + slot_gap) / (slot_height + slot_gap)))


def calculate_cell_capacity(cell_height: float, settings: Optional[LayoutSettings] = None) -> int:
    """Rows available for events in a day cell after the day-number header."""
    settings = settings or LayoutSettings()
    available = cell_height - settings.cell_header_height
    return calculate_max_visible_rows(available, settings.slot_height, settings.slot_gap)


def partition(sorted_slots: Sequence[T], cell_capacity: int) -> PartitionResult:
    """Split one day's slots into visible and hidden.

    The incoming order must already follow row index; ties are not re-sorted.
    When the day overflows, one row is reserved for the "+N more" indicator.
    With a capacity of one or less nothing but the indicator fits, so no slot
    is visible and ``show_all_mode`` is set.

    Args:
        sorted_slots: The day's slots ordered by row index
        cell_capacity: Rows that fit in the cell

    Returns:
        PartitionResult with ``len(visible) + hidden_count == len(sorted_slots)``
    """
    slots = list(sorted_slots)
    if len(slots) <= cell_capacity:
        return PartitionResult(visible=slots, hidden_events=[])

    if cell_capacity >= 2:
        max_visible = cell_capacity - 1
        show_all_mode = False
    else:
        max_visible = 0
        show_all_mode = True

    return PartitionResult(
        visible=slots[:max_visible],
        hidden_events=slots[max_visible:],
        show_all_mode=show_all_mode,
    )


def assignments_for_day(assignments: Iterable[SlotAssignment], day_index: int) -> list[SlotAssignment]:
    """Assignments covering ``day_index``, ordered by row index."""
    covering = [assignment for assignment in assignments if assignment.covers(day_index)]
    return sorted(covering, key=lambda assignment: assignment.row_index)


def build_overflow_records(
    week_index: int,
    assignments: Sequence[SlotAssignment],
    cell_capacity: int,
    days_in_week: int = DAYS_IN_WEEK,
) -> list[OverflowRecord]:
    """Partition every day of one week and emit a record for each overflowing day.

    Args:
        week_index: Position of the week in the visible grid
        assignments: Row assignments of the week's events
        cell_capacity: Rows that fit in each day cell

    Returns:
        One OverflowRecord per day with hidden events, ordered by day
    """
    records: list[OverflowRecord] = []
    for day in range(days_in_week):
        result = partition(assignments_for_day(assignments, day), cell_capacity)
        if not result.overflowed:
            continue
        hidden: list[Any] = [assignment.event for assignment in result.hidden_events]
        records.append(
            OverflowRecord(
                week_index=week_index,
                day_index=day,
                count=result.hidden_count,
                show_all_mode=result.show_all_mode,
                hidden_events=hidden,
            )
        )

    if records:
        logger.debug(
            "Week %d overflows on days %s (capacity=%d)",
            week_index,
            [record.day_index for record in records],
            cell_capacity,
        )
    return records
