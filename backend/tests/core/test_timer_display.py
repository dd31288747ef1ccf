"""Timer Display — local extrapolation between authoritative snapshots."""

from app.core.timer_display import TimerDisplay


def test_running_snapshot_extrapolates_from_local_clock():
    display = TimerDisplay()
    display.sync({"current_seconds": 10, "is_running": True}, local_now=100.0)
    assert display.seconds_at(102.5) == 12.5
    assert display.display_at(102.5) == "0:12"


def test_stopped_snapshot_is_frozen():
    display = TimerDisplay()
    display.sync({"current_seconds": 42, "is_running": False}, local_now=100.0)
    assert display.seconds_at(500.0) == 42
    assert display.display_at(500.0) == "0:42"


def test_new_snapshot_rebases_extrapolation():
    display = TimerDisplay()
    display.sync({"current_seconds": 10, "is_running": True}, local_now=100.0)
    display.sync({"current_seconds": 11, "is_running": True}, local_now=105.0)
    assert display.seconds_at(106.0) == 12


def test_local_clock_going_backwards_never_rewinds():
    display = TimerDisplay()
    display.sync({"current_seconds": 10, "is_running": True}, local_now=100.0)
    assert display.seconds_at(99.0) == 10
