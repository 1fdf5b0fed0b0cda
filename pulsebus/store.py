"""
Pulse - In-memory Event Store
Fallback persist/restore used by the bus when no external hooks are supplied.
"""

from __future__ import annotations

import logging

from .errors import CollisionError, NotFoundError
from .models import Event, NewEvent, new_id

logger = logging.getLogger("pulse.store")


class EventStore:
    """Events keyed by a generated id. Stored events are frozen."""

    def __init__(self, events: dict[str, Event] | None = None) -> None:
        self._events: dict[str, Event] = events if events is not None else {}

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def persist(self, event: NewEvent) -> str:
        """Store the event under a fresh id and return that id."""
        event_id = new_id()
        if event_id in self._events:
            raise CollisionError(event_id)
        self._events[event_id] = Event(id=event_id, name=event.name, context=event.context, args=tuple(event.args))
        logger.debug("Persisted %s as %s", event.name, event_id)
        return event_id

    def restore(self, event_id: str) -> Event:
        """Return a stored event. Raises NotFoundError for unknown ids."""
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError(event_id)
        return event
