"""Layout configuration using pydantic-settings with optional YAML overrides.

Precedence (highest first): keyword overrides, YAML file, ``CALENDARLAYOUT_*``
environment variables, built-in defaults.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Month grid defaults in pixels
CELL_HEADER_HEIGHT = 24
SLOT_HEIGHT = 20
SLOT_GAP = 2
DEFAULT_VISIBLE_EVENT_ROWS = 3


class RowStrategy(str, Enum):
    """Row assignment algorithm used by the month pipeline."""

    TETRIS = "tetris"
    CONTINUOUS = "continuous"


class LayoutSettings(BaseSettings):
    """Layout engine settings with environment variable support."""

    # Month grid geometry
    slot_height: int = Field(default=SLOT_HEIGHT, ge=1, description="Height of one event row in px")
    slot_gap: int = Field(default=SLOT_GAP, ge=0, description="Vertical gap between rows in px")
    cell_header_height: int = Field(
        default=CELL_HEADER_HEIGHT, ge=0, description="Day number strip at the top of each cell"
    )
    visible_event_rows: int = Field(
        default=DEFAULT_VISIBLE_EVENT_ROWS, ge=0, description="Rows shown in a collapsed week"
    )
    week_starts_on: int = Field(default=0, ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    row_strategy: RowStrategy = Field(
        default=RowStrategy.TETRIS, description="Row assignment used for month view"
    )

    # Recurrence expansion
    max_occurrences_per_rule: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional limit on occurrences per rule and query; exceeding it is an error",
    )

    log_level: str = Field(default="INFO", description="Log level for calendarlayout modules")

    model_config = SettingsConfigDict(
        env_prefix="CALENDARLAYOUT_",
        case_sensitive=False,
    )

    @property
    def row_height(self) -> int:
        """Vertical distance between the tops of two consecutive rows."""
        return self.slot_height + self.slot_gap

    @property
    def min_week_row_height(self) -> int:
        """Minimum height of a collapsed week row.

        The last gap serves as bottom padding for the row.
        """
        return self.cell_header_height + self.visible_event_rows * self.row_height


def _read_yaml(path: Path) -> dict[str, Any]:
    """Load a mapping from a YAML file.

    Raises:
        ConfigurationError: If the file cannot be read, parsed, or is not a mapping
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read layout config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in layout config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Layout config {path} must contain a mapping")

    # Accept either a flat mapping or one nested under a `layout:` key
    section = data.get("layout", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"`layout` section in {path} must be a mapping")
    return section


def load_settings(
    path: Optional[Union[str, Path]] = None, **overrides: Any
) -> LayoutSettings:
    """Build LayoutSettings from defaults, environment, an optional YAML file and overrides.

    Unknown keys in the YAML file are ignored with a warning. A missing file is
    not an error; defaults and environment values are used.

    Args:
        path: Optional YAML config path
        **overrides: Explicit field values that win over everything else

    Returns:
        Validated LayoutSettings

    Raises:
        ConfigurationError: If the file is unreadable or values fail validation
    """
    file_values: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            file_values = _read_yaml(config_path)
            logger.debug("Loaded layout config from %s: %s", config_path, sorted(file_values))
        else:
            logger.info("Layout config %s not found; using defaults", config_path)

    known = set(LayoutSettings.model_fields)
    for key in sorted(set(file_values) - known):
        logger.warning("Ignoring unknown layout config key %r", key)
    values = {k: v for k, v in file_values.items() if k in known}
    values.update(overrides)

    try:
        return LayoutSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid layout configuration: {e}") from e
