"""Room Activity — the monotonic last-activity bump shared by every mutating service.

Invariants:
    - last_activity_at only moves forward: the UPDATE is conditional on
      last_activity_at < now, so a slower concurrent caller can never move it back
    - Unknown room raises ResourceNotFoundError unless missing_ok (cleanup paths where
      the room may vanish mid-sweep)

Design Decisions:
    - Separate from RoomLifecycle: canvas, timer and voting services all bump activity,
      and RoomLifecycle itself depends on CanvasNodeManager
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.room import Room


class RoomActivity:
    """Bumps Room.last_activity_at from the server clock."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.clock = clock

    async def touch(self, room_id, missing_ok: bool = False) -> bool:
        """Move last_activity_at to now. Returns True if the row changed."""
        now = self.clock()
        changed = await self.store.update_where(
            Room, Room.id == room_id, Room.last_activity_at < now,
            last_activity_at=now,
        )
        if changed:
            return True
        if await self.store.get(Room, room_id) is None and not missing_ok:
            raise ResourceNotFoundError("Room", str(room_id))
        return False
