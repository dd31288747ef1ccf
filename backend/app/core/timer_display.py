"""Timer Display — client-side extrapolation between server snapshots. Pure, no IO.

Invariants:
    - display seconds = last server current_seconds + (local_now - local sync time)
      while running; frozen at the snapshot value otherwise
    - Every sync() rebases the extrapolation on the fresh snapshot
    - Only local clock differences are used: client/server clock skew never matters

Design Decisions:
    - Separate from timer_state: correctness is anchored to server timestamps there,
      smoothness is a per-client concern here
"""

from dataclasses import dataclass

from app.core.timer_state import format_display_time


@dataclass
class TimerDisplay:
    """Extrapolates a smooth display value from the last authoritative snapshot."""

    base_seconds: float = 0.0
    synced_at: float = 0.0  # local clock, seconds
    is_running: bool = False

    def sync(self, snapshot: dict, local_now: float) -> None:
        self.base_seconds = float(snapshot.get("current_seconds", 0))
        self.is_running = bool(snapshot.get("is_running", False))
        self.synced_at = local_now

    def seconds_at(self, local_now: float) -> float:
        if not self.is_running:
            return self.base_seconds
        return self.base_seconds + max(0.0, local_now - self.synced_at)

    def display_at(self, local_now: float) -> str:
        return format_display_time(self.seconds_at(local_now))
