"""Countdown engine: the fixed-interval tick loop.

The engine owns the live remaining time.  It knows nothing about
persistence or commands; the lifecycle controller drives it.

Timing
------
A ``QTimer`` fires every ``interval_ms``.  Each tick subtracts exactly one
interval (clamped at 0) and emits ``ticked``.  Reaching 0 stops the loop
and emits ``finished`` once.

Cancellation
------------
Every ``start`` opens a new run; ``cancel`` closes it.  A tick belonging to
a closed run is dropped, so once ``cancel`` returns no further ``ticked``
or ``finished`` is emitted for that run.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

TICK_INTERVAL_MS = 1000
MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND


def minute_boundary(previous_ms: int, remaining_ms: int) -> int | None:
    """Minutes left if the tick from *previous_ms* down to *remaining_ms*
    reached a whole-minute mark.

    Returns ``None`` when no mark was reached and at 0 (the finish is
    reported separately).  Each mark is reported by exactly one tick,
    whatever the tick interval.
    """
    if remaining_ms <= 0 or remaining_ms >= previous_ms:
        return None
    below = (remaining_ms - 1) // MILLIS_PER_MINUTE
    if (previous_ms - 1) // MILLIS_PER_MINUTE == below:
        return None
    return below + 1


class CountdownEngine(QObject):
    """Qt-timer driven countdown.

    Signals
    -------
    ticked(remaining_ms: int)
        Emitted after every decrement.
    finished()
        Emitted once per run when the remaining time reaches 0.
    """

    ticked = pyqtSignal(int)
    finished = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._interval_ms = interval_ms
        self._remaining = 0
        self._running = False
        self._run_id = 0

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    @property
    def remaining(self) -> int:
        """Milliseconds left on the clock."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def run_id(self) -> int:
        return self._run_id

    def start(self, total_ms: int) -> None:
        """Begin counting down from *total_ms*.

        The caller must ``cancel()`` a running countdown first.
        """
        if self._running:
            raise RuntimeError("countdown already running; cancel() it first")
        if total_ms < 0:
            raise ValueError(f"total_ms must be non-negative, got {total_ms}")
        self._run_id += 1
        self._remaining = int(total_ms)
        self._running = True
        if self._remaining == 0:
            self._finish()
            return
        self._qt_timer.start()

    def cancel(self) -> None:
        """Halt the loop.  Safe to call when nothing is running."""
        self._qt_timer.stop()
        if self._running:
            self._running = False
            self._run_id += 1

    def clear(self) -> None:
        """Cancel and forget the remaining time."""
        self.cancel()
        self._remaining = 0

    def _on_tick(self) -> None:
        if not self._running:
            return
        run_id = self._run_id
        self._remaining = max(0, self._remaining - self._interval_ms)
        self.ticked.emit(self._remaining)

        # A ticked slot may have cancelled or restarted us.
        if run_id != self._run_id:
            return
        if self._remaining <= 0:
            self._finish()

    def _finish(self) -> None:
        self._qt_timer.stop()
        self._running = False
        self.finished.emit()
