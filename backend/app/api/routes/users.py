"""User Routes — join, rename/toggle spectator, leave, and name availability.

Invariants:
    - Joining provisions canvas nodes as a side effect (player + cards for participants)
    - Leaving returns per-table counts; a partial failure surfaces as 500 PARTIAL_COMPLETION
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.schemas.room import UserJoin, UserUpdate, UserResponse, NameTakenResponse
from app.services.user_membership import UserMembership

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.post(
    "/rooms/{room_id}/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_room(
    room_id: UUID,
    body: UserJoin,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    user = await UserMembership(db, clock).join_room(
        room_id, body.name, is_spectator=body.is_spectator,
    )
    return UserResponse.model_validate(user)


@router.get("/rooms/{room_id}/users/name-taken", response_model=NameTakenResponse)
async def is_user_name_taken(
    room_id: UUID,
    name: str = Query(min_length=1, max_length=100),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    taken = await UserMembership(db, clock).is_user_name_taken(room_id, name)
    return NameTakenResponse(name=name, taken=taken)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def edit_user(
    user_id: UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    user = await UserMembership(db, clock).edit_user(
        user_id, name=body.name, is_spectator=body.is_spectator,
    )
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}")
async def leave_room(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    counts = await UserMembership(db, clock).leave_room(user_id)
    return {"user_id": str(user_id), "deleted": counts}
