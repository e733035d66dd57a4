"""Shared pytest fixtures for Tickdown tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from tickdown.database.db import configure_engine, init_db
from tickdown.timer.controller import LifecycleController
from tickdown.timer.countdown import CountdownEngine
from tickdown.timer.store import SnapshotStore, SnapshotWriter

from helpers import FakeClock, START_MILLIS


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def data_home(tmp_path, monkeypatch):
    """Keep settings and cached sounds out of the real home directory."""
    monkeypatch.setenv("TICKDOWN_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def clock():
    return FakeClock(START_MILLIS)


@pytest.fixture
def store(clock):
    return SnapshotStore(clock)


@pytest.fixture
def engine(qapp):
    """Fresh CountdownEngine with the default 1 s interval."""
    return CountdownEngine(parent=None)


@pytest.fixture
def controller(qapp, engine, store, clock):
    """Controller wired to the in-memory store and the fake clock."""
    writer = SnapshotWriter(store)
    return LifecycleController(engine, store, clock, writer=writer)
