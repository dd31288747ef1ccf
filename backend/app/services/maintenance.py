"""Maintenance — inactivity-based room deletion, orphan purge and presence sweep.

Invariants:
    - Safe alongside live traffic: every delete is idempotent, and a room deleted
      mid-sweep only leaves orphans that the next orphan sweep removes
    - Per-room or per-batch failures never abort a sweep; once the sweep has done all
      it can, PartialCompletionError reports the counts achieved
    - The orphan condition is a correlated NOT EXISTS against rooms, checked on both
      the batch read and the delete; deletes go in batches of ORPHAN_BATCH_SIZE
    - Accounting (counts of deleted records) is the only thing these sweeps log

Design Decisions:
    - CleanupResult is a plain dataclass so routes, scheduler and scripts share one shape
"""

import logging
from dataclasses import dataclass, field, asdict

from sqlalchemy import exists
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PartialCompletionError, StoreUnavailableError
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.room import Room
from app.services.canvas_nodes import CanvasNodeManager, PRESENCE_STALE_SECONDS
from app.services.room_lifecycle import RoomLifecycle, CASCADE_ORDER

logger = logging.getLogger(__name__)

DEFAULT_INACTIVE_DAYS = 5
ORPHAN_BATCH_SIZE = 100
MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass
class CleanupResult:
    rooms_deleted: int = 0
    votes_deleted: int = 0
    users_deleted: int = 0
    canvas_nodes_deleted: int = 0
    viewports_deleted: int = 0
    presence_deleted: int = 0
    failures: list[str] = field(default_factory=list)

    def add(self, counts: dict[str, int]) -> None:
        for name, count in counts.items():
            attr = f"{name}_deleted"
            setattr(self, attr, getattr(self, attr) + count)

    def merge(self, other: "CleanupResult", label: str) -> None:
        """Fold another result in; its failures are prefixed with `label`."""
        for name, count in other.counts().items():
            setattr(self, name, getattr(self, name) + count)
        self.failures.extend(f"{label}: {failure}" for failure in other.failures)

    def counts(self) -> dict[str, int]:
        result = asdict(self)
        result.pop("failures")
        return result

    def raise_if_incomplete(self, operation: str) -> None:
        if self.failures:
            raise PartialCompletionError(operation, self.counts(), self.failures)


class MaintenanceService:
    """Garbage collection for rooms and their child records."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.rooms = RoomLifecycle(db, clock)
        self.canvas = CanvasNodeManager(db, clock)
        self.clock = clock

    async def cleanup_room(self, room_id) -> CleanupResult:
        result = CleanupResult()
        try:
            result.add(await self.rooms.cascade_delete(room_id))
        except PartialCompletionError as e:
            result.add(e.completed)
            result.failures.extend(e.failures)
        return result

    async def remove_inactive_rooms(
        self, inactive_days: int = DEFAULT_INACTIVE_DAYS,
    ) -> CleanupResult:
        cutoff = self.clock() - inactive_days * MS_PER_DAY
        stale_ids = [
            room.id for room in await self.store.list_where(
                Room, Room.last_activity_at < cutoff,
            )
        ]
        result = CleanupResult()
        for room_id in stale_ids:
            result.merge(await self.cleanup_room(room_id), str(room_id))

        logger.info(
            f"Inactive room sweep: {result.rooms_deleted} of {len(stale_ids)} rooms deleted",
            extra={"operation": "remove_inactive_rooms", "counts": result.counts()},
        )
        result.raise_if_incomplete("remove_inactive_rooms")
        return result

    async def cleanup_orphaned_data(self) -> CleanupResult:
        """Delete child records whose room no longer exists."""
        result = CleanupResult()
        for name, model in CASCADE_ORDER:
            orphaned = ~exists().where(Room.id == model.room_id)
            deleted = 0
            try:
                while True:
                    batch = await self.store.list_where(
                        model, orphaned, limit=ORPHAN_BATCH_SIZE,
                    )
                    if not batch:
                        break
                    removed = await self.store.delete_where(
                        model,
                        model.id.in_([record.id for record in batch]),
                        # re-checked: a room may have been created since the batch was read
                        orphaned,
                    )
                    deleted += removed
                    if removed == 0 or len(batch) < ORPHAN_BATCH_SIZE:
                        break
            except StoreUnavailableError as e:
                result.failures.append(f"{name}: {e.message}")
            result.add({name: deleted})

        logger.info(
            "Orphan sweep finished",
            extra={"operation": "cleanup_orphaned_data", "counts": result.counts()},
        )
        result.raise_if_incomplete("cleanup_orphaned_data")
        return result

    async def cleanup_inactive_presence(
        self, stale_seconds: int = PRESENCE_STALE_SECONDS,
    ) -> dict[str, int]:
        return await self.canvas.cleanup_inactive_presence(stale_seconds)
