"""Room Lifecycle — creation, reveal/reset transitions, activity and cascading deletion.

Invariants:
    - create_room provisions the permanent timer and session nodes
    - get_room_with_related_data is read-only and sanitizes votes before returning
    - show_cards is idempotent and lazily creates the results node for canvas rooms
    - reset_game deletes the room's votes but keeps every canvas node
    - cascade_delete is an ordered sequence of idempotent deletes (children first,
      room last); a failed step never stops later steps

Design Decisions:
    - No multi-record transaction: each step commits on its own, so a crash midway
      leaves orphans that the orphan sweep collects, never a half-visible room
    - cascade_delete is shared by the admin delete and the maintenance sweeps
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import RoomType
from app.core.errors import (
    ResourceNotFoundError, PartialCompletionError, StoreUnavailableError, ErrorContext,
)
from app.core.vote_visibility import sanitize_votes
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.canvas_node import CanvasNode
from app.models.canvas_viewport import CanvasViewport
from app.models.presence import Presence
from app.models.room import Room
from app.models.user import User
from app.models.vote import Vote
from app.services.canvas_nodes import CanvasNodeManager
from app.services.room_activity import RoomActivity

logger = logging.getLogger(__name__)

# Children first, room last: an interrupted cascade leaves orphans, not a dangling room
CASCADE_ORDER = (
    ("votes", Vote),
    ("users", User),
    ("canvas_nodes", CanvasNode),
    ("viewports", CanvasViewport),
    ("presence", Presence),
)


class RoomLifecycle:
    """Room aggregate operations."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.canvas = CanvasNodeManager(db, clock)
        self.activity = RoomActivity(db, clock)
        self.clock = clock

    async def get_room(self, room_id) -> Room:
        room = await self.store.get(Room, room_id)
        if room is None:
            raise ResourceNotFoundError(
                "Room", str(room_id), ErrorContext(room_id=str(room_id)),
            )
        return room

    async def create_room(
        self,
        name: str,
        voting_categorized: bool = True,
        auto_complete_voting: bool = False,
    ) -> Room:
        now = self.clock()
        room = await self.store.insert(Room(
            name=name,
            voting_categorized=voting_categorized,
            auto_complete_voting=auto_complete_voting,
            room_type=RoomType.CANVAS.value,
            is_game_over=False,
            created_at=now,
            last_activity_at=now,
        ))
        await self.canvas.initialize_canvas_nodes(room.id)
        logger.info(f"Room created: {room.id}", extra={"room_id": str(room.id)})
        return room

    async def get_room_with_related_data(self, room_id) -> dict | None:
        """Room + users + sanitized votes, or None. Never mutates."""
        room = await self.store.get(Room, room_id)
        if room is None:
            return None
        users = await self.store.list_by_room(User, room_id, order_by=User.joined_at)
        votes = await self.store.list_by_room(Vote, room_id)
        return {
            "room": room,
            "users": users,
            "votes": sanitize_votes(votes, room.is_game_over),
        }

    async def update_activity(self, room_id, missing_ok: bool = False) -> bool:
        return await self.activity.touch(room_id, missing_ok=missing_ok)

    async def show_cards(self, room_id) -> Room:
        room = await self.get_room(room_id)
        room = await self.store.patch(room, is_game_over=True)
        if room.room_type == RoomType.CANVAS.value:
            await self.canvas.upsert_results_node(room_id)
        await self.activity.touch(room_id)
        return room

    async def reset_game(self, room_id) -> int:
        """Hide cards again and drop every vote. Returns the number of votes deleted."""
        room = await self.get_room(room_id)
        await self.store.patch(room, is_game_over=False)
        deleted = await self.store.delete_where(Vote, Vote.room_id == room_id)
        await self.activity.touch(room_id)
        return deleted

    async def delete_room(self, room_id) -> dict[str, int]:
        """Admin delete: NotFound for an unknown room, otherwise the full cascade."""
        await self.get_room(room_id)
        return await self.cascade_delete(room_id)

    async def cascade_delete(self, room_id) -> dict[str, int]:
        """Delete everything scoped to room_id, then the room. Safe to re-run."""
        counts: dict[str, int] = {}
        failures: list[str] = []
        for name, model in CASCADE_ORDER:
            try:
                counts[name] = await self.store.delete_where(
                    model, model.room_id == room_id,
                )
            except StoreUnavailableError as e:
                counts[name] = 0
                failures.append(f"{name}: {e.message}")
        try:
            counts["rooms"] = int(await self.store.delete_by_id(Room, room_id))
        except StoreUnavailableError as e:
            counts["rooms"] = 0
            failures.append(f"rooms: {e.message}")

        if failures:
            logger.error(
                f"Room cascade incomplete: {failures}",
                extra={"room_id": str(room_id), "counts": counts},
            )
            raise PartialCompletionError(
                "delete_room", counts, failures, ErrorContext(room_id=str(room_id)),
            )
        logger.info(
            f"Room deleted: {room_id}",
            extra={"room_id": str(room_id), "counts": counts},
        )
        return counts
