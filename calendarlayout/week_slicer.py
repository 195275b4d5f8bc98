"""Week slicing: clamp event ranges to a week, classify them and position them."""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from .config import LayoutSettings
from .datetime_utils import DAYS_IN_WEEK, day_index, to_epoch_millis
from .models import DateRange, Slot, SlotAssignment, SlotPosition, SlotType, WeekSlice
from .normalizer import normalize
from .row_assigner import ContinuousRowAssigner

logger = logging.getLogger(__name__)

PERCENTAGE_BASE = 100


def determine_slot_type(event_range: DateRange, week_range: DateRange) -> SlotType:
    """Classify how an event extends past the week boundaries.

    Returns:
        - FULL: starts and ends within this week
        - FIRST: starts this week, continues into the next
        - LAST: started in a previous week, ends this week
        - MIDDLE: started before and ends after this week
    """
    starts_before_week = event_range.start < week_range.start
    ends_after_week = event_range.end > week_range.end

    if starts_before_week and ends_after_week:
        return SlotType.MIDDLE
    if starts_before_week:
        return SlotType.LAST
    if ends_after_week:
        return SlotType.FIRST
    return SlotType.FULL


def calculate_horizontal_position(
    clamped_start: datetime, clamped_end: datetime, week_start: datetime
) -> tuple[float, float]:
    """Horizontal geometry as percentages of the week width.

    Returns:
        Tuple of (left, width), both within 0-100
    """
    start_day = day_index(week_start, clamped_start)
    end_day = day_index(week_start, clamped_end)
    span_days = end_day - start_day + 1
    left = start_day / DAYS_IN_WEEK * PERCENTAGE_BASE
    width = span_days / DAYS_IN_WEEK * PERCENTAGE_BASE
    return left, width


def intersects_week(event_range: DateRange, week_range: DateRange) -> bool:
    return event_range.start <= week_range.end and event_range.end >= week_range.start


def slice_event(event_range: DateRange, week_range: DateRange) -> WeekSlice:
    """Clamp one event range to one week and compute its type and geometry."""
    clamped_start = max(event_range.start, week_range.start)
    clamped_end = min(event_range.end, week_range.end)
    left, width = calculate_horizontal_position(clamped_start, clamped_end, week_range.start)
    return WeekSlice(
        clamped_start=clamped_start,
        clamped_end=clamped_end,
        type=determine_slot_type(event_range, week_range),
        left=left,
        width=width,
        day_start=day_index(week_range.start, clamped_start),
        day_end=day_index(week_range.start, clamped_end),
    )


def slot_id(event_id: str, week_range: DateRange) -> str:
    return f"{event_id}-{to_epoch_millis(week_range.start)}"


def build_slot(
    event: Any,
    week_slice: WeekSlice,
    row_index: int,
    week_range: DateRange,
    settings: LayoutSettings,
) -> Slot:
    """Combine a week slice and a row index into a positioned Slot."""
    editable = not event.is_read_only and not event.is_blocked
    return Slot(
        id=slot_id(event.id, week_range),
        source_event_id=event.id,
        start=week_slice.clamped_start,
        end=week_slice.clamped_end,
        position=SlotPosition(
            top=row_index * settings.row_height,
            left=week_slice.left,
            width=week_slice.width,
            height=settings.slot_height,
        ),
        z_index=row_index + 1,
        type=week_slice.type,
        row_index=row_index,
        color=event.color or "",
        draggable=editable,
        resizable=editable,
    )


def assign_continuous_rows(events: Iterable[Any], week_range: DateRange) -> list[SlotAssignment]:
    """Place events in input order, each in the lowest row free on all its days.

    Events that do not touch the week are skipped.
    """
    rows = ContinuousRowAssigner()
    assignments: list[SlotAssignment] = []

    for event in events:
        event_range = normalize(event)
        if not intersects_week(event_range, week_range):
            logger.debug("Event %s does not intersect week %s", event.id, week_range.start.date())
            continue
        week_slice = slice_event(event_range, week_range)
        assignments.append(
            SlotAssignment(
                event=event,
                row_index=rows.assign(week_slice.clamped_start, week_slice.clamped_end),
                day_start=week_slice.day_start,
                day_end=week_slice.day_end,
                span_days=week_slice.span_days,
            )
        )

    return assignments


def build_week_slots(
    assignments: Iterable[SlotAssignment], week_range: DateRange, settings: LayoutSettings
) -> list[Slot]:
    return [
        build_slot(
            assignment.event,
            slice_event(normalize(assignment.event), week_range),
            assignment.row_index,
            week_range,
            settings,
        )
        for assignment in assignments
    ]


def slice_events_by_week(
    events: Iterable[Any],
    week_range: DateRange,
    settings: Optional[LayoutSettings] = None,
) -> list[Slot]:
    """Slice events into positioned slots for one week using continuous rows.

    Events are placed in input order. Events that do not touch the week are
    skipped.

    Args:
        events: Timed, all-day or already expanded events
        week_range: Week bounds (first day 00:00 to last day 23:59:59.999999)
        settings: Geometry settings; defaults when omitted

    Returns:
        Slots with left/width in percent and top/height in pixels
    """
    assignments = assign_continuous_rows(events, week_range)
    return build_week_slots(assignments, week_range, settings or LayoutSettings())
