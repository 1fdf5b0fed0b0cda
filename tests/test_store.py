"""
Tests for the in-memory EventStore and the SQLite-backed store.
"""

import os
import sqlite3

import pydantic
import pytest

from pulsebus import EventBus
from pulsebus.errors import CollisionError, NotFoundError
from pulsebus.models import Event, NewEvent
from pulsebus.sqlite_store import SQLiteEventStore
from pulsebus.store import EventStore


# ── EventStore ───────────────────────────────────────────────────────────────


class TestEventStore:
    def test_restore_returns_persisted_event_with_id(self):
        store = EventStore()
        draft = NewEvent(name="user.created", context={"tenant": "a"}, args=[1, "x"])
        event_id = store.persist(draft)

        restored = store.restore(event_id)
        assert isinstance(restored, Event)
        assert restored.id == event_id
        assert restored.name == draft.name
        assert restored.context == draft.context
        assert restored.args == (1, "x")

    def test_persist_never_reuses_an_id(self):
        store = EventStore()
        draft = NewEvent(name="tick")
        ids = {store.persist(draft) for _ in range(50)}
        assert len(ids) == 50
        assert len(store) == 50

    def test_restore_unknown_id(self):
        with pytest.raises(NotFoundError, match="Event with id missing not found."):
            EventStore().restore("missing")

    def test_collision_is_fatal(self, monkeypatch):
        store = EventStore()
        monkeypatch.setattr("pulsebus.store.new_id", lambda: "fixed")
        store.persist(NewEvent(name="a"))
        with pytest.raises(CollisionError, match="Event fixed already exists."):
            store.persist(NewEvent(name="b"))
        assert store.restore("fixed").name == "a"

    def test_stored_events_are_frozen(self):
        store = EventStore()
        event = store.restore(store.persist(NewEvent(name="a")))
        with pytest.raises(pydantic.ValidationError):
            event.name = "b"

    def test_restored_args_are_immutable(self):
        store = EventStore()
        args = [1, {"k": "v"}]
        event = store.restore(store.persist(NewEvent(name="a", args=args)))

        assert isinstance(event.args, tuple)
        with pytest.raises(AttributeError):
            event.args.append(2)
        args.append(3)
        assert store.restore(event.id).args == (1, {"k": "v"})


# ── SQLiteEventStore ─────────────────────────────────────────────────────────


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteEventStore(tmp_path / "events.db")
    yield store
    store.close()


class TestSQLiteEventStore:
    def test_round_trip(self, sqlite_store):
        event_id = sqlite_store.persist(NewEvent(name="order.paid", context={"shop": 1}, args=[10, {"sku": "x"}]))

        restored = sqlite_store.restore(event_id)
        assert restored.id == event_id
        assert restored.name == "order.paid"
        assert restored.context == {"shop": 1}
        assert restored.args == (10, {"sku": "x"})
        assert sqlite_store.count() == 1

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "events.db"
        with SQLiteEventStore(path) as store:
            event_id = store.persist(NewEvent(name="a", args=[1]))
        with SQLiteEventStore(path) as store:
            assert store.restore(event_id).args == (1,)

    def test_unknown_id(self, sqlite_store):
        with pytest.raises(NotFoundError):
            sqlite_store.restore("nope")

    def test_collision(self, sqlite_store, monkeypatch):
        monkeypatch.setattr("pulsebus.sqlite_store.new_id", lambda: "same")
        sqlite_store.persist(NewEvent(name="a"))
        with pytest.raises(CollisionError):
            sqlite_store.persist(NewEvent(name="b"))
        assert sqlite_store.count() == 1

    def test_clear(self, sqlite_store):
        sqlite_store.persist(NewEvent(name="a"))
        sqlite_store.persist(NewEvent(name="b"))
        assert sqlite_store.clear() == 2
        assert sqlite_store.count() == 0

    def test_single_connection_per_store(self, sqlite_store):
        conn = sqlite_store._conn
        event_id = sqlite_store.persist(NewEvent(name="a"))
        sqlite_store.restore(event_id)
        sqlite_store.count()
        assert sqlite_store._conn is conn

    def test_close(self, tmp_path):
        store = SQLiteEventStore(tmp_path / "events.db")
        store.close()
        store.close()
        with pytest.raises(sqlite3.ProgrammingError, match="is closed"):
            store.count()

    def test_default_path_from_env(self):
        with SQLiteEventStore() as store:
            assert str(store.path) == os.environ["PULSE_DB_PATH"]

    @pytest.mark.anyio
    async def test_plugs_into_bus_for_replay(self, sqlite_store):
        received = []
        bus = EventBus(
            subscriber_mode="multiple",
            on_persist=sqlite_store.persist,
            on_restore=sqlite_store.restore,
        )
        await bus.on("ping", lambda sid, ctx, *args: received.append(args))

        event_id = await bus.emit("ping", 1, "a")
        await bus.replay(event_id)

        assert received == [(1, "a"), (1, "a")]
        assert sqlite_store.count() == 1
        assert len(bus.store) == 0
