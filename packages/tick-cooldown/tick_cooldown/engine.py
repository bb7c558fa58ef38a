"""Engine - tick loop, pacing, and lifecycle hooks."""

import logging
import time
from typing import Callable

from tick_cooldown.clock import Clock
from tick_cooldown.store import ItemStore
from tick_cooldown.types import System, TickContext

logger = logging.getLogger(__name__)

Hook = Callable[[ItemStore, TickContext], None]


class Engine:
    def __init__(
        self,
        store: ItemStore,
        period: float = 1.0,
        time_fn: Callable[[], float] = time.time,
    ) -> None:
        self._clock = Clock(period, time_fn)
        self._store = store
        self._systems: list[System] = []
        self._start_hooks: list[Hook] = []
        self._stop_hooks: list[Hook] = []
        self._stop_requested: bool = False

    @property
    def store(self) -> ItemStore:
        return self._store

    @property
    def clock(self) -> Clock:
        return self._clock

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def on_start(self, hook: Hook) -> None:
        self._start_hooks.append(hook)

    def on_stop(self, hook: Hook) -> None:
        self._stop_hooks.append(hook)

    def stop(self) -> None:
        """Ask a running loop to finish after the current tick."""
        self._stop_requested = True

    def _tick(self, now: int | None = None) -> None:
        self._clock.advance(now)
        ctx = self._clock.context(self.stop)
        for system in self._systems:
            try:
                system(self._store, ctx)
            except Exception:
                # One failing system must not halt the driver.
                logger.exception("System %r failed on tick %d", system, ctx.tick_number)
            if self._stop_requested:
                break

    def _run_hooks(self, hooks: list[Hook]) -> None:
        ctx = self._clock.context(self.stop)
        for hook in hooks:
            hook(self._store, ctx)

    def step(self, now: int | None = None) -> None:
        """Run one tick, optionally at an explicit timestamp (epoch ms)."""
        self._stop_requested = False
        self._tick(now)

    def run(self, n: int) -> None:
        self._stop_requested = False
        self._run_hooks(self._start_hooks)
        try:
            for _ in range(n):
                self._tick()
                if self._stop_requested:
                    break
        finally:
            self._run_hooks(self._stop_hooks)

    def run_forever(self) -> None:
        self._stop_requested = False
        self._run_hooks(self._start_hooks)
        period = self._clock.period
        try:
            while not self._stop_requested:
                start = time.monotonic()
                self._tick()
                if self._stop_requested:
                    break
                elapsed = time.monotonic() - start
                sleep_time = period - elapsed
                if sleep_time > 0:
                    time.sleep(sleep_time)
        finally:
            self._run_hooks(self._stop_hooks)
