"""Room Routes — create, read, reveal/reset, activity, deletion and round results.

Invariants:
    - GET /rooms/{id} returns sanitized votes only (no card fields before reveal)
    - GET /rooms/{id} is read-only and safe to poll
    - Analysis is rejected with 409 until cards are revealed

Design Decisions:
    - Thin handlers: each delegates to one service call and shapes the response
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.core.errors import ResourceNotFoundError
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.schemas.analysis import VoteAnalysisResponse
from app.schemas.room import RoomCreate, RoomResponse, RoomSnapshot, UserResponse
from app.services.room_lifecycle import RoomLifecycle
from app.services.voting import VotingEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])


def build_room_snapshot(data: dict) -> RoomSnapshot:
    return RoomSnapshot(
        room=RoomResponse.model_validate(data["room"]),
        users=[UserResponse.model_validate(u) for u in data["users"]],
        votes=data["votes"],
    )


@router.post(
    "", response_model=RoomResponse, status_code=status.HTTP_201_CREATED,
)
async def create_room(
    body: RoomCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a room with its permanent timer and session nodes."""
    room = await RoomLifecycle(db, clock).create_room(
        body.name,
        voting_categorized=body.voting_categorized,
        auto_complete_voting=body.auto_complete_voting,
    )
    return RoomResponse.model_validate(room)


@router.get("/{room_id}", response_model=RoomSnapshot)
async def get_room(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Room, users and sanitized votes."""
    data = await RoomLifecycle(db, clock).get_room_with_related_data(room_id)
    if data is None:
        raise ResourceNotFoundError("Room", str(room_id))
    return build_room_snapshot(data)


@router.post("/{room_id}/activity")
async def update_activity(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    updated = await RoomLifecycle(db, clock).update_activity(room_id)
    return {"room_id": str(room_id), "updated": updated}


@router.post("/{room_id}/reveal", response_model=RoomResponse)
async def show_cards(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    room = await RoomLifecycle(db, clock).show_cards(room_id)
    return RoomResponse.model_validate(room)


@router.post("/{room_id}/reset")
async def reset_game(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    deleted = await RoomLifecycle(db, clock).reset_game(room_id)
    return {"room_id": str(room_id), "votes_deleted": deleted}


@router.delete("/{room_id}")
async def delete_room(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Admin delete — cascades to every record scoped to the room."""
    counts = await RoomLifecycle(db, clock).delete_room(room_id)
    logger.info(
        f"Room {room_id} deleted via API", extra={"room_id": str(room_id)},
    )
    return {"room_id": str(room_id), "deleted": counts}


@router.get("/{room_id}/votes/complete")
async def are_all_votes_in(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    complete = await VotingEngine(db, clock).are_all_votes_in(room_id)
    return {"room_id": str(room_id), "all_votes_in": complete}


@router.get("/{room_id}/analysis", response_model=VoteAnalysisResponse)
async def get_vote_analysis(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    analysis = await VotingEngine(db, clock).get_vote_analysis(room_id)
    return analysis.to_dict()
