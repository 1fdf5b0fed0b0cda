"""
Pulse - Event Bus
In-process dispatch of named events to priority-ordered subscribers.

Emit flow:
1. Uniqueness guard (skipped for replays)
2. Resolve the subscriber queue for the event
3. Deliver sequentially, retrying each subscriber up to max_retries
4. Route exhausted retries to the subscriber's error handler, or raise
5. Persist the event and return its id (skipped for replays)

Subscribers are never called concurrently. State mutated by on()/remove()
while an emit is suspended is visible to the rest of that emit.
"""

from __future__ import annotations

import asyncio
import hashlib
import inspect
import logging
from typing import Any, Callable

from pydantic import ValidationError

from .debug import DebugLogger
from .errors import (
    ConfigurationError,
    DuplicateEventError,
    NoSubscribersError,
    RetryExhaustedError,
    SubscriberNotFoundError,
    dump_args,
)
from .models import BusConfig, ErrorPayload, Event, NewEvent, Subscriber, new_id
from .priority_queue import PriorityQueue
from .store import EventStore

logger = logging.getLogger("pulse.bus")

ErrorHandler = Callable[[ErrorPayload], Any]


async def _resolve(func: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callable and return its result."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _by_priority(a: Subscriber, b: Subscriber) -> bool:
    return a.priority > b.priority


def fingerprint(event_name: str, args: list[Any]) -> str:
    """Deterministic digest of an event name and its args."""
    return hashlib.sha256(f"{event_name}:{dump_args(args)}".encode()).hexdigest()


class EventBus:
    """
    Central event bus.

    Options are given either as a ``BusConfig`` or as keyword arguments
    accepted by ``BusConfig``. Invalid options, or a persist hook without a
    restore hook (or the reverse), raise ConfigurationError.

    Usage:
        bus = EventBus(subscriber_mode="multiple", unique_events=False)
        await bus.on("order.created", handle_order)
        event_id = await bus.emit("order.created", order_id)
        await bus.replay(event_id)
    """

    def __init__(self, config: BusConfig | None = None, **options: Any) -> None:
        if config is not None and options:
            raise ConfigurationError("Pass either a BusConfig or keyword options, not both.")
        try:
            self.config = config if config is not None else BusConfig(**options)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

        if (self.config.on_persist is None) != (self.config.on_restore is None):
            raise ConfigurationError("If providing a restore or persist function, both must be provided.")

        self.store = EventStore()
        self._queues: dict[str, PriorityQueue[Subscriber]] = {}
        self._error_handlers: dict[str, dict[str, ErrorHandler]] = {}
        self._fingerprints: set[str] = set()
        self._debug: DebugLogger | None = None
        if self.config.debug or self.config.on_debug is not None:
            self._debug = DebugLogger(self.config.on_debug)

    # ── Public API ────────────────────────────────────────────────────────────

    async def on(
        self,
        event_name: str,
        on_callback: Callable[..., Any],
        on_error: ErrorHandler | None = None,
        priority: int | None = None,
    ) -> str:
        """
        Subscribe a callback to an event and return the subscriber id.

        The callback is invoked as ``on_callback(subscriber_id, context, *args)``.
        Without an explicit priority, subscribers are served in registration order.
        """
        self._trace("startSubscribe", "subscribe", event_name)

        subscriber_id = None
        if self.config.on_identifier is not None:
            subscriber_id = await _resolve(self.config.on_identifier)
        subscriber_id = subscriber_id or new_id()

        queue = self._queues.get(event_name)
        if queue is None:
            queue = self._queues[event_name] = PriorityQueue(_by_priority)
        if priority is None:
            priority = 0 - queue.size()

        queue.push(
            Subscriber(
                id=subscriber_id,
                callback=on_callback,
                context=self.config.context,
                priority=priority,
            )
        )
        if on_error is not None:
            self._error_handlers.setdefault(event_name, {})[subscriber_id] = on_error

        if self.config.on_subscribe is not None:
            await _resolve(self.config.on_subscribe, event_name, subscriber_id)

        logger.info("Subscriber %s registered for %s (priority %d)", subscriber_id, event_name, priority)
        self._trace("endSubscribe", "subscribe", event_name)
        return subscriber_id

    async def emit(self, event_name: str, *args: Any) -> str | None:
        """
        Deliver an event to its subscribers.

        Returns the persisted event id, or None when persistence is disabled.
        Raises DuplicateEventError, NoSubscribersError, or RetryExhaustedError
        for a failing subscriber that has no error handler.
        """
        return await self._dispatch(event_name, list(args))

    async def remove(self, event_name: str, subscriber_id: str) -> str:
        """Unsubscribe one subscriber and drop its error handler."""
        self._trace("startRemove", "remove", event_name)
        queue = self._queues.get(event_name)
        if queue is None or queue.empty():
            raise NoSubscribersError(event_name)

        remaining = queue.to_list()
        index = next((i for i, s in enumerate(remaining) if s.id == subscriber_id), None)
        if index is None:
            raise SubscriberNotFoundError(event_name, subscriber_id)

        del remaining[index]
        queue.clear()
        for subscriber in remaining:
            queue.push(subscriber)

        self._error_handlers.get(event_name, {}).pop(subscriber_id, None)

        if self.config.on_unsubscribe is not None:
            await _resolve(self.config.on_unsubscribe, event_name, subscriber_id)

        logger.info("Subscriber %s removed from %s", subscriber_id, event_name)
        self._trace("endRemove", "remove", event_name)
        return subscriber_id

    async def remove_all(self, event_name: str) -> str:
        """Unsubscribe every subscriber of an event."""
        self._trace("startRemoveAll", "removeAll", event_name)
        queue = self._queues.get(event_name)
        if queue is None or queue.empty():
            raise NoSubscribersError(event_name)

        if self.config.on_unsubscribe is not None:
            for subscriber in queue.to_list():
                await _resolve(self.config.on_unsubscribe, event_name, subscriber.id)

        count = queue.size()
        queue.clear()
        self._error_handlers.pop(event_name, None)

        logger.info("Removed %d subscriber(s) from %s", count, event_name)
        self._trace("endRemoveAll", "removeAll", event_name)
        return event_name

    async def replay(self, event_id: str) -> None:
        """
        Re-deliver a persisted event to the current subscribers.

        Replays skip the uniqueness guard and are never persisted again.
        """
        self._trace("startReplay", "replay", event_id)
        event = await self._restore(event_id)
        await self._dispatch(event.name, list(event.args), replay=True)
        self._trace("endReplay", "replay", event_id)

    def subscriber_count(self, event_name: str) -> int:
        queue = self._queues.get(event_name)
        return queue.size() if queue is not None else 0

    def subscribers(self, event_name: str) -> list[Subscriber]:
        """Live queue snapshot in heap order."""
        queue = self._queues.get(event_name)
        return queue.to_list() if queue is not None else []

    # ── Dispatch ──────────────────────────────────────────────────────────────

    async def _dispatch(self, event_name: str, args: list[Any], replay: bool = False) -> str | None:
        if not replay:
            self._trace("startEmit", "emit", event_name)
            if not await self._is_unique(event_name, args):
                raise DuplicateEventError(event_name, args)

        queue = self._queues.get(event_name)
        if queue is None or queue.empty():
            raise NoSubscribersError(event_name)

        single = self.config.subscriber_mode == "single"
        delivered: list[str] = []

        snapshot = queue.to_list()
        if not single:
            snapshot.sort(key=lambda s: s.priority, reverse=True)

        # In single mode the snapshot only bounds the iteration count
        for entry in snapshot:
            subscriber = queue.top() if single else entry
            if subscriber is None:
                break
            if subscriber.id in delivered:
                continue

            if await self._deliver(event_name, subscriber, args):
                delivered.append(subscriber.id)
                if single:
                    queue.pop()
                    break
                continue

            if self.config.error_strategy == "exit-on-error":
                break
            if single:
                queue.pop()

        logger.debug("Event %s delivered to %d subscriber(s)", event_name, len(delivered))

        if replay:
            return None

        event_id = None
        if self.config.persist_events:
            event_id = await self._persist(NewEvent(name=event_name, context=self.config.context, args=args))
        self._trace("endEmit", "emit", event_name)
        return event_id

    async def _deliver(self, event_name: str, subscriber: Subscriber, args: list[Any]) -> bool:
        """Run one subscriber with retries. False once its failure was handled."""
        attempts = self.config.max_retries + 1
        errors: list[Exception] = []

        for attempt in range(attempts):
            if attempt:
                await asyncio.sleep(self.config.retry_interval / 1000)
            try:
                await _resolve(subscriber.callback, subscriber.id, subscriber.context, *args)
            except Exception as exc:
                errors.append(exc)
                logger.warning(
                    "Subscriber %s failed on %s (attempt %d/%d): %s",
                    subscriber.id, event_name, attempt + 1, attempts, exc,
                )
                continue
            return True

        error = RetryExhaustedError(event_name, subscriber.id, errors, attempts)
        error.__cause__ = errors[-1]
        logger.error("%s", error, exc_info=errors[-1])
        await self._handle_error(event_name, subscriber.id, error)
        return False

    async def _handle_error(self, event_name: str, subscriber_id: str, error: RetryExhaustedError) -> None:
        handler = self._error_handlers.get(event_name, {}).get(subscriber_id)
        if handler is None:
            raise error from error.__cause__

        self._trace("startErrorHandler", "error", event_name)
        await _resolve(handler, ErrorPayload(error=error, event_name=event_name, subscriber_id=subscriber_id))
        self._trace("endErrorHandler", "error", event_name)

    async def _is_unique(self, event_name: str, args: list[Any]) -> bool:
        if not self.config.unique_events:
            return True

        self._trace("startIsUnique", "unique", event_name)
        if self.config.on_unique_check is not None:
            unique = bool(await _resolve(self.config.on_unique_check, event_name, list(args)))
        else:
            digest = fingerprint(event_name, args)
            unique = digest not in self._fingerprints
            if unique:
                self._fingerprints.add(digest)
        self._trace("endIsUnique", "unique", event_name)
        return unique

    # ── Persistence ───────────────────────────────────────────────────────────

    async def _persist(self, event: NewEvent) -> str:
        self._trace("startPersist", "persist", event.name)
        event_id = None
        if self.config.on_persist is not None:
            event_id = await _resolve(self.config.on_persist, event)
        if event_id is None:
            event_id = self.store.persist(event)
        self._trace("endPersist", "persist", event.name)
        return event_id

    async def _restore(self, event_id: str) -> Event:
        self._trace("startRestore", "restore", event_id)
        restored = None
        if self.config.on_restore is not None:
            restored = await _resolve(self.config.on_restore, event_id)
        if restored is None:
            event = self.store.restore(event_id)
        elif isinstance(restored, Event):
            event = restored
        else:
            event = Event.model_validate(restored)
        self._trace("endRestore", "restore", event_id)
        return event

    def _trace(self, phase: str, prefix: str, operation_id: str) -> None:
        if self._debug is not None:
            self._debug.log(phase, prefix, operation_id)
