"""Per-view-mode positioning strategies.

Each view mode positions events differently: the month grid draws day bars,
the week and day time grids draw blocks whose height follows duration. The
strategies are selected through an explicit, immutable mapping built once by
``build_renderer_map`` and passed to whoever needs it.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Optional, Union

from .config import LayoutSettings
from .datetime_utils import (
    DateLike,
    days_between,
    end_of_day,
    end_of_month,
    js_weekday,
    start_of_day,
    start_of_month,
)
from .exceptions import UnsupportedEventTypeError, ViewModeError
from .models import CellDimensions, TimedEvent, ViewMode
from .normalizer import event_bounds, is_multi_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderPosition:
    """Pixel geometry of a rendered event."""

    top: float
    left: float
    width: float
    height: float


@dataclass(frozen=True)
class RenderLayout:
    column: int
    overlap: int = 0
    total_overlaps: int = 1


@dataclass(frozen=True)
class EventSlice:
    """Portion of a multi-day event falling on one calendar day."""

    id: str
    event_id: str
    date: datetime
    start_time: datetime
    end_time: datetime
    is_start: bool
    is_end: bool


@dataclass
class EventRenderData:
    position: RenderPosition
    layout: RenderLayout
    z_index: int = 1
    slices: Optional[list[EventSlice]] = field(default=None)


class EventRenderer(ABC):
    """Abstract base class that all view-mode renderers implement."""

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self.settings = settings or LayoutSettings()

    @abstractmethod
    def render(
        self,
        event: Any,
        view_date: DateLike,
        cell_dimensions: Optional[CellDimensions] = None,
        slot_index: int = 0,
    ) -> EventRenderData:
        """Position an event for this view.

        Args:
            event: The event to render
            view_date: The date the view is showing
            cell_dimensions: Measured grid cell size; renderer defaults when omitted
            slot_index: Vertical stacking index (month view)

        Returns:
            Render data with position, layout and day slices
        """

    @abstractmethod
    def get_snap_points(self, value: DateLike) -> list[datetime]:
        """Instants a dragged event may snap to around ``value``."""

    def calculate_slices(self, event: Any, view_date: DateLike) -> list[EventSlice]:
        """Split a multi-day event into one slice per day. Single-day events yield none."""
        if not is_multi_day(event):
            return []

        start, end = event_bounds(event)
        slices: list[EventSlice] = []
        current = start_of_day(start)
        last = start_of_day(end)
        while current <= last:
            is_start = current == start_of_day(start)
            is_end = current == last
            slices.append(
                EventSlice(
                    id=f"{event.id}-{current.date().isoformat()}",
                    event_id=event.id,
                    date=current,
                    start_time=start if is_start else current,
                    end_time=end if is_end else end_of_day(current),
                    is_start=is_start,
                    is_end=is_end,
                )
            )
            current += timedelta(days=1)
        return slices

    def column_of(self, value: DateLike) -> int:
        """Day column within a week starting on ``settings.week_starts_on``."""
        return (js_weekday(value) - self.settings.week_starts_on) % 7

    @staticmethod
    def snap_points_for_day(value: DateLike, step_minutes: int) -> list[datetime]:
        day_start = start_of_day(value)
        return [day_start + timedelta(minutes=m) for m in range(0, 24 * 60, step_minutes)]


class MonthViewRenderer(EventRenderer):
    """Horizontal bars in the month grid; multi-day events span several cells."""

    DEFAULT_CELL = CellDimensions(width=121, height=76)

    def render(
        self,
        event: Any,
        view_date: DateLike,
        cell_dimensions: Optional[CellDimensions] = None,
        slot_index: int = 0,
    ) -> EventRenderData:
        cell = cell_dimensions or self.DEFAULT_CELL
        start, end = event_bounds(event)
        column = self.column_of(start)
        week_of_month = self.week_of_month(start)
        duration_days = max(1, days_between(start, end) + 1)

        top = (
            week_of_month * cell.height
            + self.settings.cell_header_height
            + slot_index * self.settings.row_height
        )
        slices = self.calculate_slices(event, view_date) if is_multi_day(event) else None
        return EventRenderData(
            position=RenderPosition(
                top=top,
                left=column * cell.width,
                width=duration_days * cell.width,
                height=self.settings.slot_height,
            ),
            layout=RenderLayout(column=column),
            z_index=slot_index + 1,
            slices=slices,
        )

    def get_snap_points(self, value: DateLike) -> list[datetime]:
        """Every day boundary of the month."""
        current = start_of_month(value)
        last = end_of_month(value)
        points = []
        while current <= last:
            points.append(current)
            current += timedelta(days=1)
        return points

    def week_of_month(self, value: DateLike) -> int:
        first = start_of_month(value)
        leading = (js_weekday(first) - self.settings.week_starts_on) % 7
        return (start_of_day(value).day + leading - 1) // 7


class _TimeGridRenderer(EventRenderer):
    """Shared logic of the week and day time grids."""

    HOUR_HEIGHT = 100
    DAY_START_HOUR = 0
    DEFAULT_COLUMN_WIDTH = 140
    SNAP_MINUTES = 15

    def _require_timed(self, event: Any) -> TimedEvent:
        if not isinstance(event, TimedEvent):
            raise UnsupportedEventTypeError(
                f"{type(self).__name__} only supports timed events, got {getattr(event, 'type', event)!r}"
            )
        return event

    def vertical_geometry(self, event: TimedEvent) -> tuple[float, float]:
        """Top offset and height in pixels from clock time and duration."""
        start, end = event_bounds(event)
        top = (start.hour - self.DAY_START_HOUR) * self.HOUR_HEIGHT + start.minute / 60 * self.HOUR_HEIGHT
        height = (end - start).total_seconds() / 3600 * self.HOUR_HEIGHT
        return top, height

    def get_snap_points(self, value: DateLike) -> list[datetime]:
        return self.snap_points_for_day(value, self.SNAP_MINUTES)


class WeekViewRenderer(_TimeGridRenderer):
    """Time blocks in the week grid, one column per day."""

    def render(
        self,
        event: Any,
        view_date: DateLike,
        cell_dimensions: Optional[CellDimensions] = None,
        slot_index: int = 0,
    ) -> EventRenderData:
        timed = self._require_timed(event)
        column_width = cell_dimensions.width if cell_dimensions else self.DEFAULT_COLUMN_WIDTH
        top, height = self.vertical_geometry(timed)
        column = self.column_of(timed.start)
        slices = self.calculate_slices(timed, view_date) if is_multi_day(timed) else None
        return EventRenderData(
            position=RenderPosition(top=top, left=column * column_width, width=column_width, height=height),
            layout=RenderLayout(column=column),
            slices=slices,
        )


class DayViewRenderer(_TimeGridRenderer):
    """Single-day time grid with finer snapping. Also used for resource view."""

    HOUR_HEIGHT = 80
    DEFAULT_COLUMN_WIDTH = 600
    SNAP_MINUTES = 5

    def render(
        self,
        event: Any,
        view_date: DateLike,
        cell_dimensions: Optional[CellDimensions] = None,
        slot_index: int = 0,
    ) -> EventRenderData:
        timed = self._require_timed(event)
        column_width = cell_dimensions.width if cell_dimensions else self.DEFAULT_COLUMN_WIDTH
        top, height = self.vertical_geometry(timed)
        return EventRenderData(
            position=RenderPosition(top=top, left=0, width=column_width, height=height),
            layout=RenderLayout(column=0),
        )

    def calculate_slices(self, event: Any, view_date: DateLike) -> list[EventSlice]:
        return []


RendererMap = Mapping[ViewMode, EventRenderer]


def build_renderer_map(settings: Optional[LayoutSettings] = None) -> RendererMap:
    """Build the read-only view mode -> renderer mapping. Day and resource share one renderer."""
    settings = settings or LayoutSettings()
    day_renderer = DayViewRenderer(settings)
    renderers = {
        ViewMode.MONTH: MonthViewRenderer(settings),
        ViewMode.WEEK: WeekViewRenderer(settings),
        ViewMode.DAY: day_renderer,
        ViewMode.RESOURCE: day_renderer,
    }
    logger.debug("Built renderer map for view modes: %s", [mode.value for mode in renderers])
    return MappingProxyType(renderers)


def get_renderer(renderers: RendererMap, view_mode: Union[ViewMode, str]) -> EventRenderer:
    """Look up the renderer for a view mode.

    Raises:
        ViewModeError: If the view mode is unknown or has no renderer
    """
    try:
        return renderers[ViewMode(view_mode)]
    except (ValueError, KeyError) as e:
        raise ViewModeError(f"Invalid view mode: {view_mode!r}") from e
