"""Composition root: wires clock, storage, engine, controller and the
notification / alarm collaborators from ``Settings``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from PyQt6.QtCore import QObject

from .audio.alarm import AlarmPlayer
from .commands import Command, CommandKind
from .notify.notifier import Notification, Notifier
from .settings import Settings, load_settings
from .timer.clock import Clock, SystemClock
from .timer.controller import (
    LifecycleController,
    PersistPolicy,
    RecoveryOutcome,
)
from .timer.countdown import CountdownEngine, TICK_INTERVAL_MS
from .timer.store import SnapshotStore, SnapshotWriter

logger = logging.getLogger(__name__)


class TimerService(QObject):
    """The hosting environment's view of the timer."""

    def __init__(
        self,
        settings: Settings | None = None,
        parent: QObject | None = None,
        *,
        clock: Clock | None = None,
        sink: Callable[[Notification], None] | None = None,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or load_settings()

        try:
            policy = PersistPolicy(self._settings.persist_policy)
        except ValueError:
            logger.warning(
                "Unknown persist_policy %r; using %s",
                self._settings.persist_policy, PersistPolicy.EVERY_TICK.value,
            )
            policy = PersistPolicy.EVERY_TICK

        interval_ms = self._settings.tick_interval_ms
        if (
            isinstance(interval_ms, bool)
            or not isinstance(interval_ms, int)
            or interval_ms <= 0
        ):
            logger.warning(
                "Invalid tick_interval_ms %r; using %d",
                interval_ms, TICK_INTERVAL_MS,
            )
            interval_ms = TICK_INTERVAL_MS

        self.clock = clock or SystemClock()
        self.store = SnapshotStore(self.clock)
        self.writer = SnapshotWriter(self.store, self)
        self.engine = CountdownEngine(
            self, interval_ms=interval_ms,
        )
        self.controller = LifecycleController(
            self.engine, self.store, self.clock, self,
            writer=self.writer, persist_policy=policy,
        )

        self.notifier = Notifier(
            self,
            sink=sink,
            enabled=self._settings.notifications_enabled,
            minute_notifications=self._settings.minute_notifications,
        )
        self.notifier.attach(self.controller)

        self.alarm = AlarmPlayer(
            self,
            sounds_dir=sounds_dir,
            volume=self._settings.alarm_volume,
            enabled=self._settings.alarm_enabled,
        )
        self.controller.timer_finished.connect(self._on_timer_finished)

    @property
    def settings(self) -> Settings:
        return self._settings

    def boot(self) -> RecoveryOutcome:
        """Startup path: pick up whatever a previous process left behind."""
        outcome = self.controller.recover_after_restart()
        logger.info("Boot recovery: %s", outcome.value)
        return outcome

    def dispatch(self, command: Command) -> bool:
        """Apply a validated command.  Returns False when it was ignored."""
        kind = command.kind
        if kind == CommandKind.START:
            self.alarm.stop()
            if command.minutes is None:
                return self.controller.resume()
            return self.controller.start(command.minutes)
        if kind == CommandKind.RESUME:
            return self.controller.resume()
        if kind == CommandKind.STOP:
            return self.controller.stop()
        if kind == CommandKind.RESET:
            self.alarm.stop()
            return self.controller.reset()
        if kind == CommandKind.RECOVER:
            outcome = self.controller.recover_after_restart()
            return outcome in (RecoveryOutcome.RESUMED, RecoveryOutcome.EXPIRED)
        if kind == CommandKind.DISMISS:
            was_ringing = self.alarm.is_ringing
            self.alarm.stop()
            return was_ringing
        logger.debug("%s is handled by the host, not the service", kind.value)
        return False

    def shutdown(self) -> None:
        """Process teardown: keep a running countdown recoverable."""
        self.controller.shutdown()
        self.writer.flush()
        self.alarm.stop()

    def _on_timer_finished(self, time_ago_finished: int) -> None:
        logger.info("Timer finished (%d ms ago); ringing alarm", time_ago_finished)
        self.alarm.start()
