"""
Pulse - Errors
Typed exceptions raised by the bus and the event stores.
Messages are stable: callers may match on them.
"""

from __future__ import annotations

import json
from typing import Any


def dump_args(args: Any) -> str:
    """Compact JSON rendering of event args (``[1,"a"]``), str() for unknown types."""
    return json.dumps(list(args), separators=(",", ":"), ensure_ascii=False, default=str)


class PulseError(Exception):
    """Base error class for Pulse."""


class ConfigurationError(PulseError):
    """Invalid bus options, detected at construction."""


class DuplicateEventError(PulseError):
    """The uniqueness guard rejected an emit."""

    def __init__(self, event_name: str, args: Any):
        self.event_name = event_name
        self.args_json = dump_args(args)
        super().__init__(f"Event {event_name} with args {self.args_json} was already emitted.")


class NoSubscribersError(PulseError):
    """No queue, or an empty queue, for the event."""

    def __init__(self, event_name: str):
        self.event_name = event_name
        super().__init__(f"No subscribers for event {event_name}")


class SubscriberNotFoundError(PulseError):
    """Removal target is not registered for the event."""

    def __init__(self, event_name: str, subscriber_id: str):
        self.event_name = event_name
        self.subscriber_id = subscriber_id
        super().__init__(f"No subscriber with id {subscriber_id} for event {event_name}")


class RetryExhaustedError(PulseError):
    """
    A subscriber failed on every attempt of its retry budget.

    ``errors`` keeps every per-attempt exception in order; ``__cause__`` is set
    to the last one when raised.
    """

    def __init__(self, event_name: str, subscriber_id: str, errors: list[BaseException], attempts: int):
        self.event_name = event_name
        self.subscriber_id = subscriber_id
        self.errors = list(errors)
        self.attempts = attempts
        super().__init__(
            f'Event "{event_name}" failed with {len(self.errors)} error(s) '
            f'for subscriber "{subscriber_id}" after {attempts} retries.'
        )


class NotFoundError(PulseError):
    """Restore of an unknown event id."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event with id {event_id} not found.")


class CollisionError(PulseError):
    """A generated event id is already present in the store."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event {event_id} already exists.")
