"""Tests for the durable snapshot store and the coalescing writer."""

import time
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from tickdown.database.db import get_session
from tickdown.database.models import TimerPreference
from tickdown.timer.store import (
    PersistedSnapshot, SnapshotStore, SnapshotWriter,
    KEY_SYSTEM_TIME, KEY_REMAINING_TIME, KEY_TIMER_STOPPED_FLAG,
)

from helpers import START_MILLIS


def _keys() -> set[str]:
    with get_session() as db:
        return {row.key for row in db.query(TimerPreference).all()}


class TestSnapshotStore:

    def test_empty_store_loads_defaults(self, store):
        snap = store.load()
        assert snap == PersistedSnapshot(0, 0, False)
        assert not snap.was_running

    def test_save_and_load(self, store):
        store.save(90_000)
        snap = store.load()
        assert snap.last_system_time == START_MILLIS
        assert snap.last_remaining_millis == 90_000
        assert snap.stopped_flag is False
        assert snap.was_running

    def test_save_with_explicit_timestamp(self, store):
        store.save(10_000, at=123)
        assert store.load().last_system_time == 123

    def test_last_write_wins(self, store, clock):
        store.save(90_000)
        clock.advance(1_000)
        store.save(89_000)
        snap = store.load()
        assert snap.last_remaining_millis == 89_000
        assert snap.last_system_time == START_MILLIS + 1_000

    def test_individual_fields(self, store):
        store.save_system_time(42)
        store.save_remaining_time(7_000)
        store.save_stopped_flag(True)
        assert store.load() == PersistedSnapshot(42, 7_000, True)

    def test_save_system_time_defaults_to_clock(self, store):
        store.save_system_time()
        assert store.load().last_system_time == START_MILLIS

    def test_stopped_snapshot_is_not_running(self, store):
        store.save(30_000, stopped=True)
        snap = store.load()
        assert snap.stopped_flag
        assert not snap.was_running

    def test_save_without_flag_leaves_flag(self, store):
        store.save(30_000, stopped=True)
        store.save(29_000)
        assert store.load().stopped_flag is True

    def test_remove_stopped_flag(self, store):
        store.save(30_000, stopped=True)
        store.remove_stopped_flag()
        assert _keys() == {KEY_SYSTEM_TIME, KEY_REMAINING_TIME}
        assert store.load().was_running

    def test_clear_removes_all_fields(self, store):
        store.save(30_000, stopped=True)
        store.clear()
        assert _keys() == set()
        assert store.load() == PersistedSnapshot()

    def test_clear_on_empty_store(self, store):
        assert store.clear() is True

    def test_namespaces_are_isolated(self, store, clock):
        other = SnapshotStore(clock, namespace="other")
        other.save(5_000)
        assert store.load() == PersistedSnapshot()
        store.clear()
        assert other.load().last_remaining_millis == 5_000

    def test_one_row_per_key(self, store):
        for remaining in (3_000, 2_000, 1_000):
            store.save(remaining)
        with get_session() as db:
            assert db.query(TimerPreference).count() == 2
        assert KEY_TIMER_STOPPED_FLAG not in _keys()


class TestStoreFailures:

    def test_write_failure_is_swallowed(self, store):
        with patch(
            "tickdown.timer.store.get_session",
            side_effect=OperationalError("INSERT", {}, Exception("disk full")),
        ):
            assert store.save(1_000) is False
            assert store.clear() is False

    def test_read_failure_means_nothing_to_resume(self, store):
        store.save(60_000)
        with patch(
            "tickdown.timer.store.get_session",
            side_effect=OperationalError("SELECT", {}, Exception("locked")),
        ):
            snap = store.load()
        assert snap == PersistedSnapshot()
        assert not snap.was_running


class TestSnapshotWriter:

    def test_submit_defers_write(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.submit(START_MILLIS, 5_000)
        assert writer.pending == (START_MILLIS, 5_000)
        assert store.load() == PersistedSnapshot()

    def test_flush_writes_latest_only(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.submit(START_MILLIS, 5_000)
        writer.submit(START_MILLIS + 1_000, 4_000)
        writer.submit(START_MILLIS + 2_000, 3_000)
        writer.flush()

        assert writer.pending is None
        assert writer.writes == 1
        assert store.load() == PersistedSnapshot(START_MILLIS + 2_000, 3_000, False)

    def test_flush_without_pending_is_noop(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.flush()
        assert writer.writes == 0

    def test_cancel_drops_pending(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.submit(START_MILLIS, 5_000)
        writer.cancel()
        writer.flush()
        assert store.load() == PersistedSnapshot()

    def test_event_loop_flushes(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.submit(START_MILLIS, 5_000)
        deadline = time.monotonic() + 2.0
        while writer.pending is not None and time.monotonic() < deadline:
            qapp.processEvents()
        assert writer.pending is None
        assert store.load().last_remaining_millis == 5_000

    def test_failed_write_not_counted(self, qapp, store):
        writer = SnapshotWriter(store)
        writer.submit(START_MILLIS, 5_000)
        with patch.object(store, "save", return_value=False):
            writer.flush()
        assert writer.writes == 0
