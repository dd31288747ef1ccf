"""Timer Schemas — action request and state read model."""

from uuid import UUID

from pydantic import BaseModel


class TimerActionRequest(BaseModel):
    user_id: UUID | None = None


class TimerStateResponse(BaseModel):
    """Derived display values plus the raw snapshot for client-side extrapolation."""
    current_seconds: int
    is_running: bool
    display_time: str
    elapsed_seconds: float
    started_at: int | None = None
    server_now: int
