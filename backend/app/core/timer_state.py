"""Timer State Machine — server-timestamp elapsed-time model. Pure, no IO.

Invariants:
    - Stopped/Reset: is_running False, started_at None
    - Running: is_running True, started_at = server time of the start call
    - Paused: is_running False, started_at None, elapsed_seconds = accumulated total
    - current = elapsed_seconds + (now - started_at) / 1000 while running
    - start on a running timer and pause on a non-running timer raise InvalidStateError
    - reset is always legal

Design Decisions:
    - now_ms is an argument, never read here: the shell passes the server clock at call
      time, tests pass fixed values
    - pause stores the unrounded total; only reads floor to whole seconds, so repeated
      pause/resume cycles never drop fractional seconds
"""

import math
from dataclasses import replace

from app.core.domain_types import TimerAction
from app.core.errors import InvalidStateError
from app.core.node_payloads import TimerNodeData


def compute_current_seconds(data: TimerNodeData, now_ms: int) -> float:
    """Accumulated seconds plus the live segment if running."""
    current = data.elapsed_seconds
    if data.is_running and data.started_at is not None:
        current += (now_ms - data.started_at) / 1000
    return current


def format_display_time(total_seconds: float) -> str:
    """M:SS with unbounded minutes."""
    whole = max(0, math.floor(total_seconds))
    minutes, seconds = divmod(whole, 60)
    return f"{minutes}:{seconds:02d}"


def validate_timer_action(data: TimerNodeData, action: TimerAction) -> None:
    if action == TimerAction.START and data.is_running:
        raise InvalidStateError("Timer is already running")
    if action == TimerAction.PAUSE and not data.is_running:
        raise InvalidStateError("Timer is not running")


def apply_timer_action(
    data: TimerNodeData, action: TimerAction, user_id: str | None, now_ms: int,
) -> TimerNodeData:
    """Return the next timer snapshot. Raises InvalidStateError on illegal transitions."""
    validate_timer_action(data, action)

    if action == TimerAction.START:
        return replace(
            data, is_running=True, started_at=now_ms, paused_at=None,
            last_action=action.value, last_updated_by=user_id,
        )
    if action == TimerAction.PAUSE:
        return replace(
            data, is_running=False, started_at=None, paused_at=now_ms,
            elapsed_seconds=compute_current_seconds(data, now_ms),
            last_action=action.value, last_updated_by=user_id,
        )
    return replace(
        data, is_running=False, started_at=None, paused_at=None,
        elapsed_seconds=0.0, last_action=action.value, last_updated_by=user_id,
    )


def timer_view(data: TimerNodeData, now_ms: int) -> dict:
    """Read model: derived display values plus the raw snapshot for client extrapolation."""
    current = compute_current_seconds(data, now_ms)
    return {
        "current_seconds": max(0, math.floor(current)),
        "is_running": data.is_running,
        "display_time": format_display_time(current),
        "elapsed_seconds": data.elapsed_seconds,
        "started_at": data.started_at,
        "server_now": now_ms,
    }
