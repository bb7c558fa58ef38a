"""Clock and TickContext for the fixed-period tick driver."""

import time
from typing import Callable

from tick_cooldown.types import TickContext


class Clock:
    def __init__(self, period: float = 1.0, time_fn: Callable[[], float] = time.time) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self._period = period
        self._time_fn = time_fn
        self._tick_number = 0
        self._now = 0

    @property
    def period(self) -> float:
        return self._period

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def now(self) -> int:
        """Timestamp (epoch ms) of the latest tick, 0 before the first."""
        return self._now

    def read(self) -> int:
        """Current wall time in epoch ms, never earlier than the last tick."""
        return max(self._now, int(self._time_fn() * 1000))

    def advance(self, now: int | None = None) -> int:
        self._tick_number += 1
        # Wall clocks can step backwards; tick timestamps must not.
        self._now = self.read() if now is None else max(self._now, now)
        return self._tick_number

    def context(self, stop_fn: Callable[[], None]) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            now=self._now,
            period=self._period,
            request_stop=stop_fn,
        )
