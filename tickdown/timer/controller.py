"""Timer lifecycle state machine.

States
------
IDLE      Nothing to count down; the stored snapshot is cleared.
RUNNING   The countdown engine is ticking.
STOPPED   Explicitly paused by the user; resumable in this process.

Transitions
-----------
IDLE | STOPPED → RUNNING      (start / resume / recover_after_restart)
RUNNING → STOPPED             (stop)
RUNNING | STOPPED → IDLE      (reset)
RUNNING → IDLE                (countdown reaches 0)
RUNNING → IDLE                (shutdown, snapshot kept for recovery)

Commands issued in the wrong state are ignored and return ``False``;
duplicate triggers are expected when the host redelivers commands.

Durability
----------
While running, ``(now, remaining)`` is handed to a ``SnapshotWriter``
according to the ``PersistPolicy``.  Only ``stop`` sets the stopped flag,
which is how recovery tells "user paused" apart from "process died".
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .clock import Clock
from .countdown import CountdownEngine, MILLIS_PER_MINUTE
from .countdown import minute_boundary as minutes_at_boundary
from .store import SnapshotStore, SnapshotWriter

logger = logging.getLogger(__name__)


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class PersistPolicy(Enum):
    EVERY_TICK = "every_tick"
    MINUTE_BOUNDARY = "minute_boundary"


class RecoveryOutcome(Enum):
    NOTHING = "nothing"            # no live snapshot; now IDLE
    RESUMED = "resumed"            # countdown restarted with corrected time
    EXPIRED = "expired"            # finished while the process was dead
    ALREADY_RUNNING = "already_running"


class LifecycleController(QObject):
    """Drives a ``CountdownEngine`` and a ``SnapshotStore`` from commands.

    Signals
    -------
    remaining_changed(remaining_ms: int)
        Latest remaining time; use ``subscribe`` to also get the current
        value immediately.
    state_changed(new_state: TimerState)
    minute_boundary(remaining_minutes: int)
        Once per whole minute of remaining time while running.
    resumed_after_gap(stopped_at_ms, resumed_at_ms)
        After recovery restarts a live countdown.
    timer_finished(time_ago_finished_ms)
        0 for a live finish, the overdue amount when recovery found the
        countdown already expired.
    """

    remaining_changed = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    minute_boundary = pyqtSignal(int)
    resumed_after_gap = pyqtSignal(object, object)
    timer_finished = pyqtSignal(object)

    def __init__(
        self,
        engine: CountdownEngine,
        store: SnapshotStore,
        clock: Clock,
        parent: QObject | None = None,
        *,
        writer: SnapshotWriter | None = None,
        persist_policy: PersistPolicy = PersistPolicy.EVERY_TICK,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._store = store
        self._clock = clock
        self._writer = writer or SnapshotWriter(store, self)
        self._persist_policy = persist_policy
        self._state = TimerState.IDLE
        self._previous_remaining = 0

        self._engine.ticked.connect(self._on_engine_tick)
        self._engine.finished.connect(self._on_engine_finished)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def remaining(self) -> int:
        return self._engine.remaining

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def writer(self) -> SnapshotWriter:
        return self._writer

    @property
    def persist_policy(self) -> PersistPolicy:
        return self._persist_policy

    @persist_policy.setter
    def persist_policy(self, value: PersistPolicy) -> None:
        self._persist_policy = value

    def subscribe(self, slot: Callable[[int], None]) -> None:
        """Connect *slot* to ``remaining_changed`` and call it with the
        current value right away."""
        self.remaining_changed.connect(slot)
        slot(self._engine.remaining)

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def start(self, duration_minutes: int) -> bool:
        """Start a fresh countdown.  Ignored while running."""
        if self._state == TimerState.RUNNING:
            logger.debug("start(%s) ignored: already running", duration_minutes)
            return False
        if duration_minutes <= 0:
            raise ValueError(
                f"duration_minutes must be positive, got {duration_minutes}"
            )
        logger.info("Starting %d minute countdown", duration_minutes)
        self._begin_run(duration_minutes * MILLIS_PER_MINUTE)
        return True

    def resume(self) -> bool:
        """Continue from the remaining time held in memory."""
        if self._state == TimerState.RUNNING:
            logger.debug("resume() ignored: already running")
            return False
        remaining = self._engine.remaining
        if remaining <= 0:
            logger.debug("resume() ignored: nothing left to count down")
            return False
        logger.info("Resuming countdown with %d ms left", remaining)
        self._begin_run(remaining)
        return True

    def stop(self) -> bool:
        """Pause explicitly.  Recovery will not resume a stopped timer."""
        if self._state != TimerState.RUNNING:
            logger.debug("stop() ignored: not running")
            return False
        self._engine.cancel()
        self._writer.cancel()
        self._store.save(self._engine.remaining, stopped=True)
        logger.info("Stopped with %d ms left", self._engine.remaining)
        self._set_state(TimerState.STOPPED)
        return True

    def reset(self) -> bool:
        """Discard the countdown and the stored snapshot."""
        if self._state == TimerState.IDLE and self._engine.remaining <= 0:
            logger.debug("reset() ignored: nothing to reset")
            return False
        logger.info("Resetting countdown")
        self._clear_to_idle()
        return True

    def recover_after_restart(self) -> RecoveryOutcome:
        """Rebuild the countdown from the stored snapshot after the
        hosting process died (reboot, kill, command redelivery)."""
        if self._state == TimerState.RUNNING:
            logger.debug("recover_after_restart() ignored: already running")
            return RecoveryOutcome.ALREADY_RUNNING

        snapshot = self._store.load()
        if not snapshot.was_running:
            logger.info(
                "Nothing to recover (stopped=%s, remaining=%d)",
                snapshot.stopped_flag, snapshot.last_remaining_millis,
            )
            self._clear_to_idle()
            return RecoveryOutcome.NOTHING

        now = self._clock.now_millis()
        elapsed = now - snapshot.last_system_time
        if elapsed < 0:
            logger.warning(
                "Clock moved back %d ms since last save; treating as no gap",
                -elapsed,
            )
            elapsed = 0
        corrected = snapshot.last_remaining_millis - elapsed

        # The snapshot is consumed either way.
        self._store.clear()

        if corrected > 0:
            logger.info(
                "Recovered countdown: %d ms elapsed, %d ms left", elapsed, corrected,
            )
            self._begin_run(corrected)
            self.resumed_after_gap.emit(snapshot.last_system_time, now)
            return RecoveryOutcome.RESUMED

        logger.info("Countdown expired %d ms ago while not running", -corrected)
        self._complete(-corrected)
        return RecoveryOutcome.EXPIRED

    def shutdown(self) -> None:
        """Called when the hosting process is about to be torn down.

        A running countdown is saved with the stopped flag untouched so
        recovery resumes it; a countdown with nothing left is cleared.
        """
        if self._state != TimerState.RUNNING:
            return
        remaining = self._engine.remaining
        self._engine.cancel()
        self._writer.cancel()
        if remaining > 0:
            self._store.save(remaining)
            logger.info("Saved %d ms for recovery before shutdown", remaining)
            self._set_state(TimerState.IDLE)
        else:
            self._clear_to_idle()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _begin_run(self, total_ms: int) -> None:
        self._engine.cancel()
        self._writer.cancel()
        self._store.remove_stopped_flag()
        self._previous_remaining = total_ms
        self._engine.start(total_ms)
        self._set_state(TimerState.RUNNING)
        self.remaining_changed.emit(total_ms)
        self._writer.submit(self._clock.now_millis(), total_ms)

    def _on_engine_tick(self, remaining: int) -> None:
        self.remaining_changed.emit(remaining)

        previous, self._previous_remaining = self._previous_remaining, remaining
        minutes = minutes_at_boundary(previous, remaining)
        if minutes is not None:
            self.minute_boundary.emit(minutes)

        if self._persist_policy == PersistPolicy.EVERY_TICK or minutes is not None:
            self._writer.submit(self._clock.now_millis(), remaining)

    def _on_engine_finished(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        logger.info("Countdown finished")
        self._complete(0)

    def _complete(self, time_ago_finished: int) -> None:
        self._clear_to_idle()
        self.timer_finished.emit(time_ago_finished)

    def _clear_to_idle(self) -> None:
        self._engine.clear()
        self._writer.cancel()
        self._store.clear()
        self.remaining_changed.emit(0)
        self._set_state(TimerState.IDLE)

    def _set_state(self, new_state: TimerState) -> None:
        if new_state == self._state:
            return
        logger.debug("State %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self.state_changed.emit(new_state)
