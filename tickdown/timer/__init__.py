"""Timer package."""

from .clock import Clock, SystemClock
from .countdown import (
    CountdownEngine,
    TICK_INTERVAL_MS,
    MILLIS_PER_MINUTE,
    minute_boundary,
)
from .controller import (
    LifecycleController,
    TimerState,
    PersistPolicy,
    RecoveryOutcome,
)
from .store import PersistedSnapshot, SnapshotStore, SnapshotWriter

__all__ = [
    "Clock",
    "SystemClock",
    "CountdownEngine",
    "TICK_INTERVAL_MS",
    "MILLIS_PER_MINUTE",
    "minute_boundary",
    "LifecycleController",
    "TimerState",
    "PersistPolicy",
    "RecoveryOutcome",
    "PersistedSnapshot",
    "SnapshotStore",
    "SnapshotWriter",
]
