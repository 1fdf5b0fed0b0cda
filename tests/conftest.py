import os
import tempfile

# Temp SQLite store for all tests, set BEFORE any pulsebus import
_TEST_DB = tempfile.mktemp(suffix=".db")
os.environ["PULSE_DB_PATH"] = _TEST_DB

import pytest  # noqa: E402


@pytest.fixture
def calls():
    """Shared call log for subscriber callbacks."""
    return []


@pytest.fixture
def anyio_backend():
    """Run anyio-marked tests on the asyncio backend only."""
    return "asyncio"
