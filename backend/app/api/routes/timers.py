"""Timer Routes — start/pause/reset and the timer read model.

Invariants:
    - Illegal transitions return 409 INVALID_STATE
    - GET returns 404 when the node is missing or is not a timer
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.core.domain_types import TimerAction
from app.core.errors import ResourceNotFoundError, ErrorContext
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.schemas.timer import TimerActionRequest, TimerStateResponse
from app.services.timer_engine import TimerEngine

router = APIRouter(prefix="/api/v1/rooms/{room_id}/timers", tags=["timers"])


@router.get("/{node_id}", response_model=TimerStateResponse)
async def get_timer_state(
    room_id: UUID,
    node_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    state = await TimerEngine(db, clock).get_timer_state(room_id, node_id)
    if state is None:
        raise ResourceNotFoundError(
            "Timer", node_id, ErrorContext(room_id=str(room_id), node_id=node_id),
        )
    return state


@router.post("/{node_id}/{action}", response_model=TimerStateResponse)
async def apply_timer_action(
    room_id: UUID,
    node_id: str,
    action: TimerAction,
    body: TimerActionRequest | None = None,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """start | pause | reset — `now` is the server clock at call time."""
    user_id = body.user_id if body else None
    return await TimerEngine(db, clock).apply(room_id, node_id, action, user_id)
