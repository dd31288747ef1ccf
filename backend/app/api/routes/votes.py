"""Vote Routes — cast and withdraw a user's card.

Invariants:
    - Responses never echo card fields: the caller reads votes back through the
      sanitized room snapshot
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.schemas.room import VoteCast
from app.services.voting import VotingEngine

router = APIRouter(prefix="/api/v1/rooms", tags=["votes"])


@router.put("/{room_id}/votes/{user_id}")
async def pick_card(
    room_id: UUID,
    user_id: UUID,
    body: VoteCast,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    vote = await VotingEngine(db, clock).pick_card(
        room_id, user_id, body.card_label, body.card_value, body.card_icon,
    )
    return {
        "id": str(vote.id),
        "room_id": str(room_id),
        "user_id": str(user_id),
        "has_voted": True,
    }


@router.delete("/{room_id}/votes/{user_id}")
async def remove_card(
    room_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    removed = await VotingEngine(db, clock).remove_card(room_id, user_id)
    return {"room_id": str(room_id), "user_id": str(user_id), "removed": removed}
