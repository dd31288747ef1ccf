"""User Membership — join, edit and leave, keeping the canvas in step with each user.

Invariants:
    - join provisions the player node for everyone and voting cards for participants only
    - edit keeps cards in step with is_spectator: becoming a spectator removes that
      user's cards and vote, becoming a participant provisions the cards
    - leave is ordered: vote, canvas nodes, presence, user row, then activity; every
      step is idempotent and a failed step does not stop the rest
    - Name checks are case-insensitive and scoped to one room
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ResourceNotFoundError, PartialCompletionError, StoreUnavailableError, ErrorContext,
)
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.user import User
from app.models.vote import Vote
from app.services.canvas_nodes import CanvasNodeManager
from app.services.room_activity import RoomActivity

logger = logging.getLogger(__name__)


class UserMembership:
    """Room participants and their canvas footprint."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.canvas = CanvasNodeManager(db, clock)
        self.activity = RoomActivity(db, clock)
        self.clock = clock

    async def get_user(self, user_id) -> User:
        user = await self.store.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError(
                "User", str(user_id), ErrorContext(user_id=str(user_id)),
            )
        return user

    async def join_room(
        self, room_id, name: str, is_spectator: bool = False,
    ) -> User:
        # Also proves the room exists
        await self.activity.touch(room_id)
        user = await self.store.insert(User(
            room_id=room_id,
            name=name,
            is_spectator=is_spectator,
            joined_at=self.clock(),
        ))
        await self.canvas.upsert_player_node(room_id, user.id)
        if not is_spectator:
            await self.canvas.create_voting_card_nodes(room_id, user.id)
        logger.info(
            f"User joined room: {user.id}",
            extra={"room_id": str(room_id), "user_id": str(user.id)},
        )
        return user

    async def edit_user(
        self, user_id, name: str | None = None, is_spectator: bool | None = None,
    ) -> User:
        user = await self.get_user(user_id)
        room_id = user.room_id
        was_spectator = user.is_spectator
        changes: dict = {}
        if name is not None:
            changes["name"] = name
        if is_spectator is not None:
            changes["is_spectator"] = is_spectator
        if changes:
            user = await self.store.patch(user, **changes)

        if is_spectator is not None and is_spectator != was_spectator:
            if is_spectator:
                await self.store.delete_where(
                    Vote, Vote.room_id == room_id, Vote.user_id == user_id,
                )
                await self.canvas.remove_voting_card_nodes(room_id, user_id)
            else:
                await self.canvas.create_voting_card_nodes(room_id, user_id)

        await self.activity.touch(room_id, missing_ok=True)
        return user

    async def leave_room(self, user_id) -> dict[str, int]:
        user = await self.get_user(user_id)
        room_id = user.room_id
        counts = {"votes": 0, "canvas_nodes": 0, "presence": 0, "users": 0}
        failures: list[str] = []

        try:
            counts["votes"] = await self.store.delete_where(
                Vote, Vote.room_id == room_id, Vote.user_id == user_id,
            )
        except StoreUnavailableError as e:
            failures.append(f"votes: {e.message}")
        try:
            counts["canvas_nodes"] = await self.canvas.remove_player_node_and_cards(
                room_id, user_id,
            )
        except PartialCompletionError as e:
            counts["canvas_nodes"] = e.completed.get("canvas_nodes", 0)
            failures.extend(e.failures)
        except StoreUnavailableError as e:
            failures.append(f"canvas_nodes: {e.message}")
        try:
            counts["presence"] = int(
                await self.canvas.mark_user_inactive(room_id, user_id),
            )
        except StoreUnavailableError as e:
            failures.append(f"presence: {e.message}")
        try:
            counts["users"] = int(await self.store.delete_by_id(User, user_id))
        except StoreUnavailableError as e:
            failures.append(f"users: {e.message}")

        await self.activity.touch(room_id, missing_ok=True)
        context = ErrorContext(room_id=str(room_id), user_id=str(user_id))
        if failures:
            logger.error(
                f"Leave incomplete: {failures}",
                extra={"room_id": str(room_id), "user_id": str(user_id), "counts": counts},
            )
            raise PartialCompletionError("leave_room", counts, failures, context)
        return counts

    async def is_user_name_taken(self, room_id, name: str) -> bool:
        wanted = name.strip().casefold()
        users = await self.store.list_by_room(User, room_id)
        return any(u.name.strip().casefold() == wanted for u in users)
