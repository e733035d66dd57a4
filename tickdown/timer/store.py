"""Durable timer snapshot storage.

Three scalars live under one namespace in the ``timer_prefs`` table:

system_time         epoch ms of the last save
remaining_time      remaining countdown (ms) at the last save
timer_stopped_flag  True only after an explicit Stop

Every operation is best-effort.  Write failures are logged and dropped;
read failures yield an empty snapshot, which recovery treats as "nothing
to resume".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from PyQt6.QtCore import QObject, QTimer
from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import TimerPreference
from .clock import Clock

logger = logging.getLogger(__name__)

NAMESPACE = "timer_prefs"
KEY_SYSTEM_TIME = "system_time"
KEY_REMAINING_TIME = "remaining_time"
KEY_TIMER_STOPPED_FLAG = "timer_stopped_flag"

ALL_KEYS = (KEY_SYSTEM_TIME, KEY_REMAINING_TIME, KEY_TIMER_STOPPED_FLAG)


@dataclass(frozen=True)
class PersistedSnapshot:
    last_system_time: int = 0
    last_remaining_millis: int = 0
    stopped_flag: bool = False

    @property
    def was_running(self) -> bool:
        """True when the countdown was live at ``last_system_time``."""
        return not self.stopped_flag and self.last_remaining_millis > 0


class SnapshotStore:
    """Key-value access to the persisted snapshot."""

    def __init__(self, clock: Clock, namespace: str = NAMESPACE) -> None:
        self._clock = clock
        self._namespace = namespace

    # ── writes ────────────────────────────────────────────────────────

    def save_system_time(self, millis: int | None = None) -> bool:
        """Write only the timestamp.

        The per-key writers let a host update one field the way the
        key-value layout allows; the controller itself always writes
        through ``save()`` so the fields change together.
        """
        if millis is None:
            millis = self._clock.now_millis()
        return self._write({KEY_SYSTEM_TIME: int(millis)})

    def save_remaining_time(self, millis: int) -> bool:
        """Single-field write of the remaining time."""
        return self._write({KEY_REMAINING_TIME: int(millis)})

    def save_stopped_flag(self, flag: bool) -> bool:
        """Single-field write of the stopped flag."""
        return self._write({KEY_TIMER_STOPPED_FLAG: bool(flag)})

    def save(
        self,
        remaining_millis: int,
        *,
        at: int | None = None,
        stopped: bool | None = None,
    ) -> bool:
        """Write timestamp and remaining time (and optionally the flag)
        in one transaction."""
        values: dict[str, int | bool] = {
            KEY_SYSTEM_TIME: int(self._clock.now_millis() if at is None else at),
            KEY_REMAINING_TIME: int(remaining_millis),
        }
        if stopped is not None:
            values[KEY_TIMER_STOPPED_FLAG] = bool(stopped)
        return self._write(values)

    def remove(self, *keys: str) -> bool:
        try:
            with get_session() as db:
                (
                    db.query(TimerPreference)
                    .filter(
                        TimerPreference.namespace == self._namespace,
                        TimerPreference.key.in_(keys),
                    )
                    .delete(synchronize_session=False)
                )
        except SQLAlchemyError as exc:
            logger.warning("Could not remove %s: %s", ", ".join(keys), exc)
            return False
        return True

    def remove_stopped_flag(self) -> bool:
        return self.remove(KEY_TIMER_STOPPED_FLAG)

    def clear(self) -> bool:
        """Drop the whole snapshot."""
        return self.remove(*ALL_KEYS)

    # ── reads ─────────────────────────────────────────────────────────

    def load(self) -> PersistedSnapshot:
        try:
            with get_session() as db:
                rows = (
                    db.query(TimerPreference)
                    .filter(TimerPreference.namespace == self._namespace)
                    .all()
                )
                by_key = {row.key: row for row in rows}
        except SQLAlchemyError as exc:
            logger.warning("Could not read timer snapshot: %s", exc)
            return PersistedSnapshot()

        def _int(key: str) -> int:
            row = by_key.get(key)
            return int(row.int_value) if row and row.int_value is not None else 0

        flag_row = by_key.get(KEY_TIMER_STOPPED_FLAG)
        return PersistedSnapshot(
            last_system_time=_int(KEY_SYSTEM_TIME),
            last_remaining_millis=_int(KEY_REMAINING_TIME),
            stopped_flag=bool(flag_row and flag_row.bool_value),
        )

    # ── internal ──────────────────────────────────────────────────────

    def _write(self, values: dict[str, int | bool]) -> bool:
        try:
            with get_session() as db:
                for key, value in values.items():
                    row = (
                        db.query(TimerPreference)
                        .filter_by(namespace=self._namespace, key=key)
                        .first()
                    )
                    if row is None:
                        row = TimerPreference(namespace=self._namespace, key=key)
                        db.add(row)
                    if isinstance(value, bool):
                        row.bool_value = value
                        row.int_value = None
                    else:
                        row.int_value = value
                        row.bool_value = None
                    row.updated_at = datetime.utcnow()
        except SQLAlchemyError as exc:
            logger.warning("Could not persist %s: %s", ", ".join(values), exc)
            return False
        return True


class SnapshotWriter(QObject):
    """Persists ``(timestamp, remaining)`` pairs off the tick path.

    Submissions are coalesced: only the most recent pending pair is
    written, on the next event-loop turn.  Skipped intermediate pairs are
    harmless because recovery only reads the latest one.
    """

    def __init__(self, store: SnapshotStore, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self._pending: tuple[int, int] | None = None
        self._writes = 0

        self._flush_timer = QTimer(self)
        self._flush_timer.setSingleShot(True)
        self._flush_timer.setInterval(0)
        self._flush_timer.timeout.connect(self.flush)

    @property
    def pending(self) -> tuple[int, int] | None:
        return self._pending

    @property
    def writes(self) -> int:
        """Number of snapshots actually written."""
        return self._writes

    def submit(self, at_millis: int, remaining_millis: int) -> None:
        self._pending = (at_millis, remaining_millis)
        if not self._flush_timer.isActive():
            self._flush_timer.start()

    def flush(self) -> None:
        """Write the pending pair now, if there is one."""
        self._flush_timer.stop()
        pending, self._pending = self._pending, None
        if pending is None:
            return
        at_millis, remaining_millis = pending
        if self._store.save(remaining_millis, at=at_millis):
            self._writes += 1

    def cancel(self) -> None:
        """Drop the pending pair without writing it."""
        self._flush_timer.stop()
        self._pending = None
