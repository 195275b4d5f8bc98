"""Unit tests for calendarlayout.config."""

import logging

import pytest

from calendarlayout.config import LayoutSettings, RowStrategy, load_settings
from calendarlayout.exceptions import CalendarLayoutError, ConfigurationError

pytestmark = pytest.mark.unit


class TestLayoutSettings:
    def test_defaults(self) -> None:
        settings = LayoutSettings()

        assert settings.slot_height == 20
        assert settings.slot_gap == 2
        assert settings.cell_header_height == 24
        assert settings.visible_event_rows == 3
        assert settings.week_starts_on == 0
        assert settings.row_strategy is RowStrategy.TETRIS
        assert settings.max_occurrences_per_rule is None

    def test_derived_heights(self) -> None:
        settings = LayoutSettings()

        assert settings.row_height == 22
        assert settings.min_week_row_height == 24 + 3 * 22

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("CALENDARLAYOUT_SLOT_HEIGHT", "30")
        monkeypatch.setenv("CALENDARLAYOUT_ROW_STRATEGY", "continuous")

        settings = LayoutSettings()

        assert settings.slot_height == 30
        assert settings.row_strategy is RowStrategy.CONTINUOUS


class TestLoadSettings:
    def test_no_path_gives_defaults(self) -> None:
        assert load_settings() == LayoutSettings()

    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        assert load_settings(tmp_path / "absent.yaml").slot_height == 20

    def test_layout_section(self, tmp_path) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text("layout:\n  slot_height: 18\n  week_starts_on: 1\n", encoding="utf-8")

        settings = load_settings(path)

        assert settings.slot_height == 18
        assert settings.week_starts_on == 1

    def test_flat_mapping(self, tmp_path) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text("visible_event_rows: 5\nrow_strategy: continuous\n", encoding="utf-8")

        settings = load_settings(path)

        assert settings.visible_event_rows == 5
        assert settings.row_strategy is RowStrategy.CONTINUOUS

    def test_file_wins_over_environment(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CALENDARLAYOUT_SLOT_GAP", "6")
        path = tmp_path / "layout.yaml"
        path.write_text("slot_gap: 4\n", encoding="utf-8")

        assert load_settings(path).slot_gap == 4

    def test_keyword_overrides_win(self, tmp_path) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text("slot_gap: 4\n", encoding="utf-8")

        assert load_settings(path, slot_gap=1).slot_gap == 1

    def test_unknown_keys_are_ignored(self, tmp_path, caplog) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text("slot_height: 18\ntheme: dark\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="calendarlayout.config"):
            settings = load_settings(path)

        assert settings.slot_height == 18
        assert "theme" in caplog.text

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text("", encoding="utf-8")

        assert load_settings(path) == LayoutSettings()

    @pytest.mark.parametrize(
        "content",
        [
            "slot_height: [unclosed\n",
            "- just\n- a list\n",
            "layout: 3\n",
            "slot_height: 0\n",
            "week_starts_on: 7\n",
        ],
    )
    def test_invalid_config_raises(self, tmp_path, content) -> None:
        path = tmp_path / "layout.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(path)

        assert isinstance(exc_info.value, CalendarLayoutError)
