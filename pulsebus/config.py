"""
Pulse - Centralized configuration
All environment variables and constants in a single place.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = _PROJECT_ROOT / "data"

# SQLite event store (optional)
DEFAULT_DB_PATH = str(DATA_DIR / "events.db")
DB_PATH = os.getenv("PULSE_DB_PATH", DEFAULT_DB_PATH)

# ── Delivery ──────────────────────────────────────────────────────────────────

MAX_RETRIES = int(os.getenv("PULSE_MAX_RETRIES", "3"))
RETRY_INTERVAL_MS = int(os.getenv("PULSE_RETRY_INTERVAL_MS", "500"))

SUBSCRIBER_MODES = ("single", "multiple")
SUBSCRIBER_MODE = os.getenv("PULSE_SUBSCRIBER_MODE", "single")

ERROR_STRATEGIES = ("exit-on-error", "continue-on-error")
ERROR_STRATEGY = os.getenv("PULSE_ERROR_STRATEGY", "exit-on-error")

# ── Uniqueness / persistence ──────────────────────────────────────────────────

UNIQUE_EVENTS = os.getenv("PULSE_UNIQUE_EVENTS", "1") == "1"
PERSIST_EVENTS = os.getenv("PULSE_PERSIST_EVENTS", "1") == "1"

# Bytes of entropy behind generated subscriber and event ids
ID_BYTES = int(os.getenv("PULSE_ID_BYTES", "16"))

# ── Debug timing ──────────────────────────────────────────────────────────────

DEBUG = os.getenv("PULSE_DEBUG", "0") == "1"

# ── Version ───────────────────────────────────────────────────────────────────

VERSION = "0.4.0"
