"""Timer Engine — applies timer actions to persisted timer nodes.

Invariants:
    - `now` is read from the server clock once per call, at call time
    - Transitions come from core/timer_state.py; this shell only reads, applies, patches
    - Concurrent start/pause on one node is last-write-wins on the node row; each
      transition recomputes elapsed time from server timestamps, so no time is lost
    - Every mutation bumps room activity
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import NodeType, TimerAction
from app.core.errors import ResourceNotFoundError, ErrorContext
from app.core.node_payloads import TimerNodeData
from app.core.timer_state import apply_timer_action, timer_view
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.canvas_node import CanvasNode
from app.services.room_activity import RoomActivity


class TimerEngine:
    """Server-authoritative start/pause/reset for timer nodes."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.activity = RoomActivity(db, clock)
        self.clock = clock

    async def _find_timer(self, room_id, node_id: str) -> CanvasNode | None:
        node = await self.store.find_one(CanvasNode, room_id, node_id=node_id)
        if node is None or node.type != NodeType.TIMER.value:
            return None
        return node

    async def apply(self, room_id, node_id: str, action: TimerAction, user_id) -> dict:
        node = await self._find_timer(room_id, node_id)
        if node is None:
            raise ResourceNotFoundError(
                "Timer", node_id, ErrorContext(room_id=str(room_id), node_id=node_id),
            )
        now = self.clock()
        current = TimerNodeData.from_dict(node.data or {})
        updated = apply_timer_action(
            current, action, str(user_id) if user_id else None, now,
        )
        await self.store.patch(
            node,
            data=updated.to_dict(),
            last_updated_by=user_id,
            last_updated_at=now,
        )
        await self.activity.touch(room_id, missing_ok=True)
        return timer_view(updated, now)

    async def start(self, room_id, node_id: str, user_id) -> dict:
        return await self.apply(room_id, node_id, TimerAction.START, user_id)

    async def pause(self, room_id, node_id: str, user_id) -> dict:
        return await self.apply(room_id, node_id, TimerAction.PAUSE, user_id)

    async def reset(self, room_id, node_id: str, user_id) -> dict:
        return await self.apply(room_id, node_id, TimerAction.RESET, user_id)

    async def get_timer_state(self, room_id, node_id: str) -> dict | None:
        """Derived display values plus the raw snapshot; None if no such timer."""
        node = await self._find_timer(room_id, node_id)
        if node is None:
            return None
        return timer_view(TimerNodeData.from_dict(node.data or {}), self.clock())
