"""
Pulse - Pydantic models
Events, subscriber records and bus options with validation.
"""

from __future__ import annotations

import secrets
from typing import Any, Callable, Literal

from pydantic import BaseModel, Field

from . import config

SubscriberMode = Literal["single", "multiple"]
ErrorStrategy = Literal["exit-on-error", "continue-on-error"]


def new_id() -> str:
    """Random url-safe identifier used for subscribers and stored events."""
    return secrets.token_urlsafe(config.ID_BYTES)


class NewEvent(BaseModel):
    """An emitted event before persistence assigns it an id."""

    name: str
    context: Any = None
    args: list[Any] = Field(default_factory=list)


class Event(NewEvent):
    model_config = {"frozen": True}

    id: str
    args: tuple[Any, ...] = ()


class Subscriber(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    id: str
    callback: Callable[..., Any]
    context: Any = None
    priority: int = 0


class ErrorPayload(BaseModel):
    """Passed to a subscriber's error handler once its retries are exhausted."""

    model_config = {"arbitrary_types_allowed": True}

    error: Exception
    event_name: str
    subscriber_id: str


class BusConfig(BaseModel):
    model_config = {
        "arbitrary_types_allowed": True,
        "extra": "forbid",
        "validate_default": True,
        "json_schema_extra": {
            "examples": [
                {
                    "max_retries": 2,
                    "retry_interval": 100,
                    "subscriber_mode": "multiple",
                    "error_strategy": "continue-on-error",
                }
            ]
        },
    }

    context: Any = None
    # Env-backed defaults are read per instance and validated like explicit values
    max_retries: int = Field(
        default_factory=lambda: config.MAX_RETRIES, ge=0, description="Retries after the first attempt"
    )
    retry_interval: int = Field(
        default_factory=lambda: config.RETRY_INTERVAL_MS, ge=0, description="Backoff between attempts (ms)"
    )
    unique_events: bool = Field(default_factory=lambda: config.UNIQUE_EVENTS)
    persist_events: bool = Field(default_factory=lambda: config.PERSIST_EVENTS)
    subscriber_mode: SubscriberMode = Field(default_factory=lambda: config.SUBSCRIBER_MODE)
    error_strategy: ErrorStrategy = Field(default_factory=lambda: config.ERROR_STRATEGY)
    debug: bool = Field(default_factory=lambda: config.DEBUG)

    # External collaborators, plain functions or coroutine functions
    on_identifier: Callable[[], Any] | None = None
    on_unique_check: Callable[[str, list[Any]], Any] | None = None
    on_persist: Callable[[NewEvent], Any] | None = None
    on_restore: Callable[[str], Any] | None = None
    on_subscribe: Callable[[str, str], Any] | None = None
    on_unsubscribe: Callable[[str, str], Any] | None = None
    on_debug: Callable[[str, str, float | None], Any] | None = None
