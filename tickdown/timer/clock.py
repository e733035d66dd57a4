"""Wall-clock source used to timestamp snapshots and measure gaps."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_millis(self) -> int:
        """Current wall-clock time in epoch milliseconds."""
        ...


class SystemClock:
    """The real wall clock.

    Wall time (not ``time.monotonic``) is required here: the gap being
    measured spans process death and reboots.
    """

    def now_millis(self) -> int:
        return int(time.time() * 1000)
