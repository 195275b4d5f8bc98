"""In-memory store for declaratively registered events and resources."""

import logging
from typing import Any, Optional, Union

from .exceptions import DuplicateEventError, EventNotFoundError
from .models import AllDayEvent, RecurringEvent, Resource, TimedEvent

logger = logging.getLogger(__name__)

Event = Union[TimedEvent, AllDayEvent, RecurringEvent]


class EventRegistry:
    """Keeps events and resources keyed by id, in registration order.

    The registry is owned by whoever creates it; there is no shared global
    instance. Updates store a new model instance and leave the previous one
    untouched.
    """

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}
        self._resources: dict[str, Resource] = {}

    # Events

    def register_event(self, event: Event) -> None:
        """Add an event.

        Raises:
            DuplicateEventError: If an event with the same id is registered
        """
        if event.id in self._events:
            raise DuplicateEventError(f"Event already registered: {event.id}")
        self._events[event.id] = event
        logger.debug("Registered %s event %s", event.type, event.id)

    def update_event(self, event_id: str, **updates: Any) -> Event:
        """Replace fields of a registered event and return the new instance.

        Raises:
            EventNotFoundError: If no event is registered under ``event_id``
        """
        existing = self._get_or_raise(self._events, event_id, "Event")
        if updates.get("id", event_id) != event_id:
            raise ValueError("Event id cannot be changed through update_event")
        updated = existing.model_copy(update=updates)
        self._events[event_id] = updated
        return updated

    def unregister_event(self, event_id: str) -> None:
        if self._events.pop(event_id, None) is None:
            raise EventNotFoundError(f"Event not registered: {event_id}")
        logger.debug("Unregistered event %s", event_id)

    def get_event(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    @property
    def events(self) -> list[Event]:
        return list(self._events.values())

    def get_events_by_resource(self, resource_id: str) -> list[Event]:
        """Events whose ``resource_id`` matches, in registration order."""
        return [event for event in self._events.values() if event.resource_id == resource_id]

    # Resources

    def register_resource(self, resource: Resource) -> None:
        if resource.id in self._resources:
            raise DuplicateEventError(f"Resource already registered: {resource.id}")
        self._resources[resource.id] = resource

    def update_resource(self, resource_id: str, **updates: Any) -> Resource:
        existing = self._get_or_raise(self._resources, resource_id, "Resource")
        updated = existing.model_copy(update=updates)
        self._resources[resource_id] = updated
        return updated

    def unregister_resource(self, resource_id: str) -> None:
        if self._resources.pop(resource_id, None) is None:
            raise EventNotFoundError(f"Resource not registered: {resource_id}")

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        return self._resources.get(resource_id)

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources.values())

    def clear(self) -> None:
        """Drop all events and resources."""
        self._events.clear()
        self._resources.clear()

    @staticmethod
    def _get_or_raise(store: dict[str, Any], key: str, kind: str) -> Any:
        try:
            return store[key]
        except KeyError as e:
            raise EventNotFoundError(f"{kind} not registered: {key}") from e
