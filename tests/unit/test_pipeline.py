"""
Unit tests for calendarlayout.pipeline.MonthLayoutPipeline.

December 2025 with Sunday weeks renders five rows:
Nov 30, Dec 7, Dec 14, Dec 21 and Dec 28.
"""

from datetime import date, datetime

import pytest

from calendarlayout.config import LayoutSettings, RowStrategy
from calendarlayout.models import CellDimensions, DateRange, SlotType
from calendarlayout.pipeline import MonthLayoutPipeline, WeekLayout, expansion_window
from calendarlayout.week_slicer import slice_events_by_week

pytestmark = pytest.mark.unit

VIEW_DATE = date(2025, 12, 10)
DEC_21_MILLIS = 1766275200000
DEC_28_MILLIS = 1766880000000


@pytest.fixture
def pipeline(settings) -> MonthLayoutPipeline:
    return MonthLayoutPipeline(settings)


class TestLayoutMonth:
    def test_one_week_layout_per_grid_row(self, pipeline) -> None:
        layout = pipeline.layout_month([], VIEW_DATE)

        assert [week.week_index for week in layout.weeks] == [0, 1, 2, 3, 4]
        assert layout.weeks[0].week_range.start == datetime(2025, 11, 30)
        assert layout.weeks[-1].week_range.end.date() == date(2026, 1, 3)
        assert layout.overflow == []

    def test_event_crossing_weeks_is_sliced(self, pipeline, make_event) -> None:
        trip = make_event("trip", datetime(2025, 12, 26, 9), datetime(2025, 12, 29, 17))

        layout = pipeline.layout_month([trip], VIEW_DATE)

        (first,) = layout.weeks[3].slots
        (second,) = layout.weeks[4].slots
        assert (first.id, first.type) == (f"trip-{DEC_21_MILLIS}", SlotType.FIRST)
        assert (second.id, second.type) == (f"trip-{DEC_28_MILLIS}", SlotType.LAST)
        assert first.position.left == pytest.approx(5 / 7 * 100)
        assert second.position.left == 0
        assert second.position.width == pytest.approx(2 / 7 * 100)

    def test_recurring_events_are_expanded_over_visible_weeks(self, pipeline, make_recurring) -> None:
        daily = make_recurring(
            "standup", datetime(2025, 12, 1, 9), datetime(2025, 12, 1, 9, 15), {"frequency": "daily"}
        )

        layout = pipeline.layout_month([daily], VIEW_DATE)

        assert len(layout.slots) == 34
        assert len(layout.weeks[0].slots) == 6
        assert all(len(week.slots) == 7 for week in layout.weeks[1:])
        assert all(slot.source_event_id.startswith("standup_") for slot in layout.slots)

    def test_events_outside_grid_are_ignored(self, pipeline, make_event) -> None:
        events = [
            make_event("old", datetime(2025, 11, 20, 9), datetime(2025, 11, 20, 10)),
            make_event("later", datetime(2026, 1, 10, 9), datetime(2026, 1, 10, 10)),
        ]

        assert pipeline.layout_month(events, VIEW_DATE).slots == []

    def test_week_start_setting_shifts_grid(self) -> None:
        layout = MonthLayoutPipeline(LayoutSettings(week_starts_on=1)).layout_month([], VIEW_DATE)

        assert layout.weeks[0].week_range.start == datetime(2025, 12, 1)

    def test_layout_is_deterministic(self, pipeline, make_event, make_all_day, make_recurring) -> None:
        events = [
            make_all_day("conf", date(2025, 12, 8), date(2025, 12, 16)),
            make_event("lunch", datetime(2025, 12, 10, 12), datetime(2025, 12, 10, 13)),
            make_recurring("gym", datetime(2025, 12, 1, 7), datetime(2025, 12, 1, 8), {"frequency": "weekly"}),
        ]

        first = [slot.model_dump() for slot in pipeline.layout_month(events, VIEW_DATE).slots]
        second = [slot.model_dump() for slot in pipeline.layout_month(events, VIEW_DATE).slots]

        assert first == second


class TestOverflow:
    def _busy_day(self, make_event, count: int):
        return [
            make_event(f"e{i}", datetime(2025, 12, 24, 8 + i), datetime(2025, 12, 24, 9 + i)) for i in range(count)
        ]

    def test_overflowing_day_is_reported(self, pipeline, make_event) -> None:
        layout = pipeline.layout_month(self._busy_day(make_event, 5), VIEW_DATE, CellDimensions(width=121, height=90))

        assert layout.cell_capacity == 3
        (record,) = layout.overflow
        assert (record.week_index, record.day_index, record.count) == (3, 3, 3)
        assert [event.id for event in record.hidden_events] == ["e2", "e3", "e4"]
        assert layout.overflow_for_week(3) == [record]
        assert layout.overflow_for_week(2) == []

    def test_default_capacity_follows_visible_rows(self, pipeline, make_event) -> None:
        layout = pipeline.layout_month(self._busy_day(make_event, 3), VIEW_DATE)

        assert layout.cell_capacity == 3
        assert layout.overflow == []

    def test_tiny_cells_switch_to_show_all(self, pipeline, make_event) -> None:
        layout = pipeline.layout_month(self._busy_day(make_event, 2), VIEW_DATE, CellDimensions(width=121, height=40))

        (record,) = layout.overflow
        assert layout.cell_capacity == 0
        assert record.show_all_mode
        assert record.count == 2

    def test_slots_are_kept_even_when_hidden(self, pipeline, make_event) -> None:
        layout = pipeline.layout_month(self._busy_day(make_event, 5), VIEW_DATE, CellDimensions(width=121, height=90))

        assert len(layout.weeks[3].slots) == 5


class TestRowStrategy:
    def _events(self, make_event, make_all_day):
        return [
            make_event("short", datetime(2025, 12, 22, 9), datetime(2025, 12, 22, 10)),
            make_all_day("long", date(2025, 12, 22), date(2025, 12, 24)),
        ]

    def test_tetris_places_longest_first(self, make_event, make_all_day) -> None:
        pipeline = MonthLayoutPipeline(LayoutSettings(row_strategy=RowStrategy.TETRIS))

        week = pipeline.layout_month(self._events(make_event, make_all_day), VIEW_DATE).weeks[3]

        assert {slot.source_event_id: slot.row_index for slot in week.slots} == {"long": 0, "short": 1}

    def test_continuous_keeps_input_order(self, make_event, make_all_day) -> None:
        pipeline = MonthLayoutPipeline(LayoutSettings(row_strategy=RowStrategy.CONTINUOUS))

        week = pipeline.layout_month(self._events(make_event, make_all_day), VIEW_DATE).weeks[3]

        assert {slot.source_event_id: slot.row_index for slot in week.slots} == {"short": 0, "long": 1}
        assert [a.row_index for a in week.assignments] == [0, 1]

    def test_continuous_matches_week_slicer(self, week_range, make_event, make_all_day) -> None:
        settings = LayoutSettings(row_strategy=RowStrategy.CONTINUOUS)
        events = self._events(make_event, make_all_day)

        (week,) = MonthLayoutPipeline(settings).layout_weeks(events, [week_range]).weeks

        assert week.slots == slice_events_by_week(events, week_range, settings)


class TestRecurrenceAtGridStart:
    """January 2025 starts its grid on Sunday Dec 29 2024."""

    def test_occurrence_started_before_grid_is_shown(self, pipeline, make_event, make_recurring) -> None:
        weekend = make_recurring(
            "r", datetime(2024, 12, 6, 9), datetime(2024, 12, 9, 9), {"frequency": "weekly"}
        )
        plain = make_event("p", datetime(2024, 12, 27, 9), datetime(2024, 12, 30, 9))

        first_week = pipeline.layout_month([weekend, plain], date(2025, 1, 15)).weeks[0]

        slots = {slot.source_event_id: slot for slot in first_week.slots}
        assert set(slots) == {"p", "r_1735290000000", "r_1735894800000"}
        carried = slots["r_1735290000000"]
        assert carried.type == SlotType.LAST
        assert carried.position.left == slots["p"].position.left == 0
        assert carried.position.width == slots["p"].position.width
        assert carried.start == datetime(2024, 12, 29)
        assert carried.end == datetime(2024, 12, 30, 9)

    def test_occurrence_ending_before_grid_is_dropped(self, pipeline, make_recurring) -> None:
        weekend = make_recurring(
            "r", datetime(2024, 12, 6, 9), datetime(2024, 12, 7, 9), {"frequency": "weekly"}
        )

        first_week = pipeline.layout_month([weekend], date(2025, 1, 15)).weeks[0]

        assert [slot.source_event_id for slot in first_week.slots] == ["r_1735894800000"]

    def test_expansion_window_reaches_back_one_duration(self, make_recurring, week_range) -> None:
        event = make_recurring("r", datetime(2025, 12, 5, 9), datetime(2025, 12, 8, 9), {"frequency": "weekly"})

        window = expansion_window(event, week_range)

        assert window.start == datetime(2025, 12, 18)
        assert window.end == week_range.end


class TestLayoutWeeks:
    def test_no_weeks(self, pipeline, make_event) -> None:
        layout = pipeline.layout_weeks([make_event("a", datetime(2025, 12, 22, 9), datetime(2025, 12, 22, 10))], [])

        assert layout.weeks == []
        assert layout.overflow == []

    def test_explicit_week(self, pipeline, week_range, make_event) -> None:
        layout = pipeline.layout_weeks(
            [make_event("a", datetime(2025, 12, 22, 9), datetime(2025, 12, 22, 10))], [week_range]
        )

        (week,) = layout.weeks
        assert week.week_range == week_range
        assert [slot.source_event_id for slot in week.slots] == ["a"]


class TestWeekLayoutMetrics:
    def test_empty_week(self, settings, week_range) -> None:
        week = WeekLayout(week_index=0, week_range=week_range)

        assert week.max_row == 0
        assert week.expanded_height(settings) == 24 + 22
        assert not week.has_overflow(settings.min_week_row_height, settings)
        assert week.week_height(settings, expanded=False) is None
        assert week.week_height(settings, expanded=True) == settings.min_week_row_height

    def test_crowded_week_needs_expansion(self, pipeline, settings, make_event) -> None:
        events = [
            make_event(f"e{i}", datetime(2025, 12, 24, 8 + i), datetime(2025, 12, 24, 9 + i)) for i in range(5)
        ]

        week = pipeline.layout_month(events, VIEW_DATE).weeks[3]

        assert week.max_row == 4
        assert week.expanded_height(settings) == 24 + 5 * 22
        assert week.has_overflow(settings.min_week_row_height, settings)
        assert week.week_height(settings, expanded=True) == 134

    def test_week_range_fixture_matches_grid(self, pipeline, week_range) -> None:
        assert pipeline.layout_month([], VIEW_DATE).weeks[3].week_range == DateRange(
            start=week_range.start, end=week_range.end
        )
