"""Timer Ticker — cooperative ~100 ms re-render loop for Python timer clients.

Invariants:
    - Ticks only while the last snapshot said is_running
    - Every on_snapshot() rebases the extrapolation (TimerDisplay.sync)
    - A snapshot with is_running False renders once and cancels the loop immediately
    - close() stops ticking for good; later snapshots are ignored

Design Decisions:
    - Single asyncio task, no threads: it only recomputes a derived display value
    - local_clock injectable (defaults to time.monotonic) so tests drive time by hand
"""

import asyncio
import time
from typing import Callable

from app.core.timer_display import TimerDisplay

TICK_SECONDS = 0.1

RenderCallback = Callable[[str], None]


class TimerTicker:
    """Drives a render callback from the latest authoritative timer snapshot."""

    def __init__(
        self,
        render: RenderCallback,
        tick_seconds: float = TICK_SECONDS,
        local_clock: Callable[[], float] = time.monotonic,
    ):
        self.render = render
        self.tick_seconds = tick_seconds
        self.local_clock = local_clock
        self.display = TimerDisplay()
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def ticking(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_snapshot(self, snapshot: dict) -> None:
        if self._closed:
            return
        now = self.local_clock()
        self.display.sync(snapshot, now)
        self.render(self.display.display_at(now))
        if self.display.is_running:
            if not self.ticking:
                self._task = asyncio.create_task(self._tick())
        else:
            self._cancel()

    def close(self) -> None:
        self._closed = True
        self._cancel()

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _tick(self) -> None:
        while self.display.is_running:
            await asyncio.sleep(self.tick_seconds)
            self.render(self.display.display_at(self.local_clock()))
