# Pulse package

from .bus import EventBus
from .config import VERSION as __version__
from .errors import (
    CollisionError,
    ConfigurationError,
    DuplicateEventError,
    NoSubscribersError,
    NotFoundError,
    PulseError,
    RetryExhaustedError,
    SubscriberNotFoundError,
)
from .models import BusConfig, ErrorPayload, Event, NewEvent, Subscriber
from .priority_queue import PriorityQueue
from .sqlite_store import SQLiteEventStore
from .store import EventStore

__all__ = [
    "__version__",
    "EventBus",
    "BusConfig",
    "Event",
    "NewEvent",
    "Subscriber",
    "ErrorPayload",
    "PriorityQueue",
    "EventStore",
    "SQLiteEventStore",
    "PulseError",
    "ConfigurationError",
    "DuplicateEventError",
    "NoSubscribersError",
    "SubscriberNotFoundError",
    "RetryExhaustedError",
    "NotFoundError",
    "CollisionError",
]
