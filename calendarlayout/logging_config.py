"""
Logging configuration for calendarlayout.

The engine itself only emits records through module loggers; hosts that want
console output call ``configure_logging`` once at startup.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENGINE_MODULES = [
    "calendarlayout",
    "calendarlayout.recurrence",
    "calendarlayout.normalizer",
    "calendarlayout.week_slicer",
    "calendarlayout.row_assigner",
    "calendarlayout.overflow",
    "calendarlayout.pipeline",
    "calendarlayout.config",
]

# Third-party loggers kept quiet unless something goes wrong
QUIET_LOGGERS = ["dateutil", "pydantic"]


def _env_debug() -> bool:
    return os.getenv("CALENDARLAYOUT_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def configure_logging(level: Optional[str] = None, debug_mode: bool = False) -> None:
    """
    Configure console logging for hosts embedding the layout engine.

    A colorized stderr handler is installed on the root logger only when the root
    logger has no handlers yet.

    Args:
        level: Root log level name; falls back to INFO
        debug_mode: Enable DEBUG for the engine modules

    Environment Variables:
        CALENDARLAYOUT_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALENDARLAYOUT_LOG_LEVEL: Override the root log level
    """
    final_debug = debug_mode or _env_debug()

    env_level = os.getenv("CALENDARLAYOUT_LOG_LEVEL", "").upper()
    level_name = (level or "INFO").upper()
    if env_level in _VALID_LEVELS:
        level_name = env_level
    if final_debug:
        level_name = "DEBUG"
    if level_name not in _VALID_LEVELS:
        level_name = "INFO"
    root_level = getattr(logging, level_name)

    root = logging.getLogger()
    root.setLevel(root_level)
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT, log_colors=LOG_COLORS))
        root.addHandler(handler)

    engine_level = logging.DEBUG if final_debug else root_level
    logger_config: dict[str, int] = {name: logging.WARNING for name in QUIET_LOGGERS}
    for module in ENGINE_MODULES:
        logger_config[module] = engine_level

    for logger_name, logger_level in logger_config.items():
        logging.getLogger(logger_name).setLevel(logger_level)

    root.debug("calendarlayout logging configured (root=%s, debug=%s)", level_name, final_debug)


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ["calendarlayout", *QUIET_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
