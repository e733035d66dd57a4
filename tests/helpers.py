"""Shared test helpers for Tickdown."""

from tickdown.timer.countdown import CountdownEngine

# 2024-03-01 12:00:00 UTC
START_MILLIS = 1_709_294_400_000


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now_millis: int = START_MILLIS):
        self.now = now_millis

    def now_millis(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


def run_ticks(engine: CountdownEngine, count: int, clock: FakeClock | None = None) -> None:
    """Deliver *count* ticks without waiting on the real timer.

    When *clock* is given it moves forward one interval per tick, the way
    wall time would.
    """
    for _ in range(count):
        if clock is not None:
            clock.advance(engine.interval_ms)
        engine._on_tick()
