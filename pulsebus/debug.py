"""
Pulse - Debug timing
Brackets bus operations with start/end marks and reports their duration,
either to a user callback or to the ``pulse.debug`` logger.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

logger = logging.getLogger("pulse.debug")

DebugCallback = Callable[[str, str, float | None], Any]

# Operation prefix -> (log tag, verb)
_TAGS: dict[str, tuple[str, str]] = {
    "replay": ("[Replay]", "replaying"),
    "emit": ("[Emit]", "emitting"),
    "subscribe": ("[New]", "subscribing"),
    "remove": ("[End]", "removing"),
    "removeAll": ("[Clear]", "removing all"),
    "persist": ("[Persist]", "persisting"),
    "restore": ("[Restore]", "restoring"),
    "error": ("[Error]", "handling error"),
    "unique": ("[Unique]", "checking uniqueness of"),
}


class DebugLogger:
    """Timing marks keyed by ``prefix::operation_id``."""

    def __init__(self, callback: DebugCallback | None = None) -> None:
        self._callback = callback
        self._started: dict[str, float] = {}

    def log(self, phase: str, prefix: str, operation_id: str) -> None:
        """Record ``start*`` phases, report ``end*`` phases with their duration."""
        key = f"{prefix}::{operation_id}"
        duration_ms: float | None = None
        if phase.startswith("start"):
            self._started[key] = time.perf_counter()
        else:
            duration_ms = self.duration(key)

        if self._callback is not None:
            self._callback(phase, operation_id, duration_ms)
            return

        tag, verb = _TAGS.get(prefix, (f"[{prefix}]", prefix))
        if duration_ms is None:
            state = "Started" if phase.startswith("start") else "Ended"
            logger.debug("%s %s %s %s", tag, state, verb, operation_id)
        else:
            logger.debug("%s Ended %s %s (%.2f ms)", tag, verb, operation_id, duration_ms)

    def duration(self, key: str) -> float | None:
        """Elapsed ms since the matching start mark, None if there was none."""
        started = self._started.pop(key, None)
        if started is None:
            return None
        return round((time.perf_counter() - started) * 1000, 2)
