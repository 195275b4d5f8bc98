"""Collision detection and column assignment for the week/day time grid."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .datetime_utils import DateLike, start_of_day
from .models import TimedEvent

logger = logging.getLogger(__name__)


@dataclass
class CollisionGroup:
    """Events that transitively overlap, with their column assignments."""

    events: list[TimedEvent]
    columns: int
    assignments: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class EventBounds:
    width: float
    left: float


class EventLayoutEngine:
    """Side-by-side layout of overlapping timed events on one day.

    Events are grouped into collision groups (a new group starts when an event
    begins at or after the latest end seen so far) and each group is packed
    into the fewest columns with a first-fit scan.
    """

    def calculate_layout(self, events: Iterable[TimedEvent], day: DateLike) -> list[CollisionGroup]:
        """Group the day's timed events and assign columns within each group."""
        relevant = self.filter_events_for_date(events, day)
        ordered = sorted(relevant, key=lambda event: event.start)

        groups = []
        for group_events in self.find_collision_groups(ordered):
            assignments: dict[str, int] = {}
            columns = self.assign_columns(group_events, assignments)
            groups.append(CollisionGroup(events=group_events, columns=columns, assignments=assignments))

        logger.debug("Laid out %d events into %d collision groups", len(ordered), len(groups))
        return groups

    @staticmethod
    def calculate_event_bounds(column: int, total_columns: int, cell_width: float) -> EventBounds:
        """Pixel width and left offset of an event in a group of ``total_columns``."""
        width = cell_width / total_columns
        return EventBounds(width=width, left=column * width)

    @staticmethod
    def filter_events_for_date(events: Iterable[TimedEvent], day: DateLike) -> list[TimedEvent]:
        """Timed events touching ``day``. Other variants are ignored."""
        target = start_of_day(day)
        return [
            event
            for event in events
            if isinstance(event, TimedEvent)
            and start_of_day(event.start) <= target <= start_of_day(event.end)
        ]

    @staticmethod
    def find_collision_groups(events: list[TimedEvent]) -> list[list[TimedEvent]]:
        """Split start-ordered events into groups of transitively overlapping events."""
        groups: list[list[TimedEvent]] = []
        current: list[TimedEvent] = []
        group_end = datetime.min

        for event in events:
            if event.start >= group_end:
                if current:
                    groups.append(current)
                current = [event]
                group_end = event.end
            else:
                current.append(event)
                group_end = max(group_end, event.end)

        if current:
            groups.append(current)
        return groups

    @staticmethod
    def assign_columns(events: list[TimedEvent], assignments: dict[str, int]) -> int:
        """First-fit column packing. Returns the number of columns used."""
        column_end_times: list[datetime] = []

        for event in events:
            column = 0
            while column < len(column_end_times) and column_end_times[column] > event.start:
                column += 1

            assignments[event.id] = column
            if column < len(column_end_times):
                column_end_times[column] = event.end
            else:
                column_end_times.append(event.end)

        return len(column_end_times)
