"""Timer Ticker — local re-render loop driven by server snapshots."""

import asyncio

from app.services.timer_ticker import TimerTicker


class LocalClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _snapshot(current_seconds: int, is_running: bool) -> dict:
    return {"current_seconds": current_seconds, "is_running": is_running}


async def test_running_snapshot_starts_ticking():
    frames: list[str] = []
    local = LocalClock()
    ticker = TimerTicker(frames.append, tick_seconds=0.01, local_clock=local)

    ticker.on_snapshot(_snapshot(59, True))
    assert ticker.ticking is True
    assert frames == ["0:59"]

    local.now += 2
    await asyncio.sleep(0.05)
    assert frames[-1] == "1:01"
    ticker.close()


async def test_stopped_snapshot_renders_once_and_stops():
    frames: list[str] = []
    ticker = TimerTicker(frames.append, tick_seconds=0.01, local_clock=LocalClock())

    ticker.on_snapshot(_snapshot(5, True))
    ticker.on_snapshot(_snapshot(7, False))

    assert ticker.ticking is False
    await asyncio.sleep(0.03)
    assert frames == ["0:05", "0:07"]


async def test_new_snapshot_rebases_display():
    frames: list[str] = []
    local = LocalClock()
    ticker = TimerTicker(frames.append, tick_seconds=0.01, local_clock=local)

    ticker.on_snapshot(_snapshot(10, True))
    local.now += 30
    ticker.on_snapshot(_snapshot(12, True))

    assert frames[-1] == "0:12"
    assert ticker.display.seconds_at(local.now + 1) == 13
    ticker.close()


async def test_close_ignores_later_snapshots():
    frames: list[str] = []
    ticker = TimerTicker(frames.append, tick_seconds=0.01, local_clock=LocalClock())
    ticker.on_snapshot(_snapshot(1, True))
    ticker.close()
    ticker.on_snapshot(_snapshot(2, True))

    assert ticker.ticking is False
    assert frames == ["0:01"]
