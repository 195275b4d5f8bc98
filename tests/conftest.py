"""Shared fixtures for calendarlayout tests."""

from datetime import date, datetime
from typing import Any

import pytest

from calendarlayout.config import LayoutSettings
from calendarlayout.datetime_utils import end_of_day
from calendarlayout.models import AllDayEvent, DateRange, RecurrenceRule, RecurringEvent, TimedEvent


@pytest.fixture(autouse=True)
def _isolate_layout_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host CALENDARLAYOUT_* variables from leaking into settings."""
    for name in (
        "CALENDARLAYOUT_SLOT_HEIGHT",
        "CALENDARLAYOUT_SLOT_GAP",
        "CALENDARLAYOUT_CELL_HEADER_HEIGHT",
        "CALENDARLAYOUT_VISIBLE_EVENT_ROWS",
        "CALENDARLAYOUT_WEEK_STARTS_ON",
        "CALENDARLAYOUT_ROW_STRATEGY",
        "CALENDARLAYOUT_MAX_OCCURRENCES_PER_RULE",
        "CALENDARLAYOUT_LOG_LEVEL",
        "CALENDARLAYOUT_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> LayoutSettings:
    """Default month grid geometry: 20px rows, 2px gaps, 24px header."""
    return LayoutSettings()


@pytest.fixture
def week_range() -> DateRange:
    """Sunday Dec 21 2025 00:00 through Saturday Dec 27 2025 end of day."""
    return DateRange(start=datetime(2025, 12, 21), end=end_of_day(datetime(2025, 12, 27)))


@pytest.fixture
def january_2025() -> DateRange:
    return DateRange(start=datetime(2025, 1, 1), end=end_of_day(datetime(2025, 1, 31)))


@pytest.fixture
def make_event():
    """Factory for timed events with sensible defaults."""

    def _make(event_id: str, start: datetime, end: datetime, **kwargs: Any) -> TimedEvent:
        return TimedEvent(id=event_id, title=kwargs.pop("title", event_id), start=start, end=end, **kwargs)

    return _make


@pytest.fixture
def make_all_day():
    def _make(event_id: str, first: date, last: date = None, **kwargs: Any) -> AllDayEvent:
        return AllDayEvent(id=event_id, date=first, end_date=last, **kwargs)

    return _make


@pytest.fixture
def make_recurring():
    """Factory for recurring events; ``rule`` accepts a RecurrenceRule or its fields."""

    def _make(
        event_id: str,
        start: datetime,
        end: datetime,
        rule: Any,
        exceptions: list = None,
        **kwargs: Any,
    ) -> RecurringEvent:
        if isinstance(rule, dict):
            rule = RecurrenceRule(**rule)
        return RecurringEvent(
            id=event_id,
            start=start,
            end=end,
            rule=rule,
            exceptions=exceptions or [],
            **kwargs,
        )

    return _make


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "critical_path: Core functionality tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")
