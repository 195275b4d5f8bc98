"""Recurrence rule expansion for the layout engine."""

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any, Optional

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, YEARLY, rrule

from .config import LayoutSettings
from .datetime_utils import to_epoch_millis
from .exceptions import RecurrenceExpansionError, UnsupportedFrequencyError
from .models import DateRange, DayOfWeek, Frequency, RecurrenceRule, RecurringEvent, TimedEvent
from .normalizer import event_bounds

logger = logging.getLogger(__name__)

_FREQUENCY_MAP = {
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
    Frequency.YEARLY: YEARLY,
}

_WEEKDAY_MAP = {
    DayOfWeek.SUN: SU,
    DayOfWeek.MON: MO,
    DayOfWeek.TUE: TU,
    DayOfWeek.WED: WE,
    DayOfWeek.THU: TH,
    DayOfWeek.FRI: FR,
    DayOfWeek.SAT: SA,
}

# Parent fields that never carry over to an occurrence
_TEMPORAL_FIELDS = {"id", "type", "start", "end", "rule", "exceptions"}


def occurrence_id(parent_id: str, occurrence_start: datetime) -> str:
    """Deterministic composite ID: ``<parentId>_<epochMillis>``."""
    return f"{parent_id}_{to_epoch_millis(occurrence_start)}"


class RecurrenceExpander:
    """Expands recurring events into concrete occurrences within a query window.

    Stateless between calls; the only configuration is the optional per-rule
    occurrence limit.
    """

    def __init__(self, settings: Optional[LayoutSettings] = None):
        """Initialize expander.

        Args:
            settings: Layout settings; defaults are used when omitted
        """
        config = settings or LayoutSettings()
        self.max_occurrences = config.max_occurrences_per_rule

    def build_rule(self, event: RecurringEvent) -> tuple[rrule, Optional[datetime]]:
        """Translate a RecurrenceRule into a dateutil rrule anchored at the template start.

        When both ``count`` and ``until`` are set, only ``count`` is handed to
        dateutil and ``until`` is returned separately so the caller can stop at
        whichever bound comes first.

        Returns:
            Tuple of (rrule, extra_until_bound)

        Raises:
            UnsupportedFrequencyError: If the frequency is not one of daily/weekly/monthly/yearly
        """
        rule: RecurrenceRule = event.rule
        try:
            frequency = Frequency(rule.frequency)
        except ValueError as e:
            raise UnsupportedFrequencyError(rule.frequency) from e

        options: dict[str, Any] = {
            "freq": _FREQUENCY_MAP[frequency],
            "dtstart": event.start,
            "interval": rule.interval or 1,
        }

        extra_until: Optional[datetime] = None
        if rule.count is not None and rule.until is not None:
            options["count"] = rule.count
            extra_until = rule.until
        elif rule.count is not None:
            options["count"] = rule.count
        elif rule.until is not None:
            options["until"] = rule.until

        if rule.by_day:
            options["byweekday"] = tuple(_WEEKDAY_MAP[DayOfWeek(day)] for day in rule.by_day)
        if rule.by_month:
            options["bymonth"] = tuple(rule.by_month)
        if rule.by_month_day:
            options["bymonthday"] = tuple(rule.by_month_day)
        if rule.by_set_position:
            options["bysetpos"] = tuple(rule.by_set_position)
        if rule.week_start is not None:
            options["wkst"] = _WEEKDAY_MAP[DayOfWeek(rule.week_start)]

        return rrule(**options), extra_until

    def iter_occurrence_starts(
        self, event: RecurringEvent, query_range: DateRange
    ) -> Iterator[datetime]:
        """Yield rule starts inside ``[query_range.start, query_range.end]`` in order.

        Enumeration always stops at the query end, so rules without ``count`` or
        ``until`` still terminate.
        """
        rule, extra_until = self.build_rule(event)
        window_end = query_range.end
        if extra_until is not None and extra_until < window_end:
            window_end = extra_until

        for start in rule:
            if start > window_end:
                break
            if start >= query_range.start:
                yield start

    def apply_exceptions(
        self, starts: Iterable[datetime], exceptions: Iterable[datetime]
    ) -> list[datetime]:
        """Drop starts matching an exception to the millisecond.

        Exceptions that match no generated start are silently ignored.
        """
        excluded = {to_epoch_millis(ex) for ex in exceptions}
        if not excluded:
            return list(starts)
        return [start for start in starts if to_epoch_millis(start) not in excluded]

    def generate_occurrences(
        self, event: RecurringEvent, starts: Iterable[datetime]
    ) -> list[TimedEvent]:
        """Materialize occurrences sharing the template duration and parent fields."""
        template_start, template_end = event_bounds(event)
        duration = template_end - template_start
        shared = event.model_dump(exclude=_TEMPORAL_FIELDS)

        return [
            TimedEvent(
                **shared,
                id=occurrence_id(event.id, start),
                start=start,
                end=start + duration,
                is_recurrence_instance=True,
                parent_id=event.id,
                occurrence_date=start,
            )
            for start in starts
        ]

    def expand(self, event: RecurringEvent, query_range: DateRange) -> list[TimedEvent]:
        """Expand one recurring event within a query window.

        Args:
            event: Recurring event whose start/end define the first occurrence
            query_range: Inclusive window occurrence starts must fall in

        Returns:
            Occurrences ordered by start

        Raises:
            UnsupportedFrequencyError: If the rule frequency is unknown
            RecurrenceExpansionError: If dateutil fails to generate the rule, or the
                window holds more occurrences than ``max_occurrences_per_rule``
        """
        try:
            starts: list[datetime] = []
            for start in self.iter_occurrence_starts(event, query_range):
                if self.max_occurrences is not None and len(starts) >= self.max_occurrences:
                    logger.error(
                        "Recurrence expansion for %s exceeds %d occurrences", event.id, self.max_occurrences
                    )
                    raise RecurrenceExpansionError(
                        f"Recurrence for {event.id} exceeds {self.max_occurrences} occurrences in "
                        f"{query_range.start.isoformat()}..{query_range.end.isoformat()}"
                    )
                starts.append(start)
        except (UnsupportedFrequencyError, RecurrenceExpansionError):
            raise
        except (TypeError, ValueError, OverflowError) as e:
            logger.exception("Recurrence expansion failed for event %s", event.id)
            raise RecurrenceExpansionError(f"Failed to expand recurrence for {event.id}: {e}") from e

        kept = self.apply_exceptions(starts, event.exceptions)
        occurrences = self.generate_occurrences(event, kept)
        logger.debug(
            "Expanded %s: generated=%d excluded=%d window=%s..%s",
            event.id,
            len(starts),
            len(starts) - len(kept),
            query_range.start.isoformat(),
            query_range.end.isoformat(),
        )
        return occurrences

    def expand_events(self, events: Iterable[Any], query_range: DateRange) -> list[Any]:
        """Replace every recurring event with its occurrences, keeping input order.

        Non-recurring events pass through unchanged.
        """
        expanded: list[Any] = []
        for event in events:
            if isinstance(event, RecurringEvent):
                expanded.extend(self.expand(event, query_range))
            else:
                expanded.append(event)
        return expanded


def expand_recurring_event(
    event: RecurringEvent,
    query_range: DateRange,
    settings: Optional[LayoutSettings] = None,
) -> list[TimedEvent]:
    """Expand a single recurring event with a throwaway expander."""
    return RecurrenceExpander(settings).expand(event, query_range)
