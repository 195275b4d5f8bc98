"""Custom exception hierarchy for the calendar layout engine.

All errors raised by calendarlayout derive from CalendarLayoutError so hosts can
catch engine failures in one place while still distinguishing configuration
problems from bad input.
"""


class CalendarLayoutError(Exception):
    """Base exception for all calendar layout engine errors."""


class RecurrenceError(CalendarLayoutError):
    """Base exception for recurrence rule problems."""


class UnsupportedFrequencyError(RecurrenceError):
    """Recurrence rule uses a frequency the expander cannot generate."""

    def __init__(self, frequency: object) -> None:
        """Initialize UnsupportedFrequencyError.

        Args:
            frequency: The offending frequency value
        """
        super().__init__(f"Unsupported recurrence frequency: {frequency!r}")
        self.frequency = frequency


class RecurrenceExpansionError(RecurrenceError):
    """Occurrence generation failed for an otherwise valid rule."""


class ViewModeError(CalendarLayoutError):
    """Requested view mode has no registered renderer."""


class UnsupportedEventTypeError(CalendarLayoutError):
    """A renderer received an event variant it cannot position.

    Raised when:
    - The week or day time grid is asked to render an all-day event
    - The time grid is asked to render an unexpanded recurring event
    """


class RegistryError(CalendarLayoutError):
    """Base exception for event/resource registry errors."""


class DuplicateEventError(RegistryError):
    """An event or resource with the same id is already registered."""


class EventNotFoundError(RegistryError):
    """No event or resource is registered under the requested id."""


class ConfigurationError(CalendarLayoutError):
    """Layout configuration file could not be read or is invalid."""
