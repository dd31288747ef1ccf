"""Canvas Node Manager — persisted layout nodes, viewports and presence for a room.

Invariants:
    - At most one node per (room_id, node_id): every creation path goes through
      EntityStore.insert_unique, so re-invocation and concurrent calls are no-ops
    - Locked nodes reject position writes (NodeLockedError); lock toggling is unconditional
    - removal of a user's nodes is one index scan over the room, never N point lookups
    - Position writes are last-write-wins and bump room activity
    - Presence is stale after PRESENCE_STALE_SECONDS without a ping
    - Writes that can create records (initialize, story, viewport, presence) require the
      room to exist; an unknown room is ResourceNotFoundError, never an orphan row

Design Decisions:
    - Viewport and presence live here: they are canvas UI-sync state keyed by (room, user)
    - Payloads are built from core/node_payloads.py dataclasses so every persisted
      `data` blob has its variant's exact shape
    - Removal is per-record and keeps going on failure; failures are reported together
      as PartialCompletionError after everything that could be deleted was
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.canvas_layout import (
    Position, TIMER_POSITION, SESSION_POSITION, RESULTS_POSITION, STORY_POSITION,
    TIMER_NODE_ID, SESSION_NODE_ID, RESULTS_NODE_ID, STORY_NODE_ID,
    player_node_id, voting_card_node_id,
    default_player_position, voting_card_positions,
)
from app.core.domain_types import NodeType, RoomType, DEFAULT_DECK
from app.core.errors import (
    ResourceNotFoundError, InvalidStateError, NodeLockedError, PartialCompletionError,
    StoreUnavailableError, ErrorContext,
)
from app.core.node_payloads import (
    PlayerNodeData, SessionNodeData, TimerNodeData, VotingCardNodeData,
    ResultsNodeData, StoryNodeData, NodePayload,
)
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.canvas_node import CanvasNode
from app.models.canvas_viewport import CanvasViewport
from app.models.presence import Presence
from app.models.room import Room
from app.services.room_activity import RoomActivity

logger = logging.getLogger(__name__)

PRESENCE_STALE_SECONDS = 300


class CanvasNodeManager:
    """Owns the mapping from room layout to persisted canvas records."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.activity = RoomActivity(db, clock)
        self.clock = clock

    # ─── Reads ───────────────────────────────────────────────────

    async def _require_room(self, room_id) -> Room:
        room = await self.store.get(Room, room_id)
        if room is None:
            raise ResourceNotFoundError(
                "Room", str(room_id), ErrorContext(room_id=str(room_id)),
            )
        return room

    async def get_canvas_nodes(self, room_id) -> list[CanvasNode]:
        return await self.store.list_by_room(
            CanvasNode, room_id, order_by=CanvasNode.node_id,
        )

    async def get_node(self, room_id, node_id: str) -> CanvasNode:
        node = await self.store.find_one(CanvasNode, room_id, node_id=node_id)
        if node is None:
            raise ResourceNotFoundError(
                "CanvasNode", node_id,
                ErrorContext(room_id=str(room_id), node_id=node_id),
            )
        return node

    # ─── Provisioning ────────────────────────────────────────────

    async def _ensure_node(
        self,
        room_id,
        node_id: str,
        node_type: NodeType,
        position: Position,
        payload: NodePayload,
        user_id=None,
    ) -> tuple[CanvasNode, bool]:
        node = CanvasNode(
            room_id=room_id,
            node_id=node_id,
            type=node_type.value,
            position_x=position.x,
            position_y=position.y,
            data=payload.to_dict(),
            is_locked=False,
            last_updated_by=user_id,
            last_updated_at=self.clock(),
        )
        return await self.store.insert_unique(node, node_id=node_id)

    async def initialize_canvas_nodes(self, room_id) -> list[CanvasNode]:
        """Create the permanent timer and session nodes. No-op once any node exists."""
        room = await self._require_room(room_id)
        if room.room_type != RoomType.CANVAS.value:
            raise InvalidStateError(
                f"Room '{room_id}' is not a canvas room",
                ErrorContext(room_id=str(room_id)),
            )
        existing = await self.store.find_one(CanvasNode, room_id)
        if existing is not None:
            return []
        timer, _ = await self._ensure_node(
            room_id, TIMER_NODE_ID, NodeType.TIMER, TIMER_POSITION, TimerNodeData(),
        )
        session, _ = await self._ensure_node(
            room_id, SESSION_NODE_ID, NodeType.SESSION, SESSION_POSITION,
            SessionNodeData(),
        )
        return [timer, session]

    async def upsert_player_node(
        self, room_id, user_id, position: Position | None = None,
    ) -> CanvasNode:
        node_id = player_node_id(user_id)
        existing = await self.store.find_one(CanvasNode, room_id, node_id=node_id)
        if existing is not None:
            return existing
        if position is None:
            players = await self.store.list_by_room(
                CanvasNode, room_id, type=NodeType.PLAYER.value,
            )
            position = default_player_position(len(players))
        node, _ = await self._ensure_node(
            room_id, node_id, NodeType.PLAYER, position,
            PlayerNodeData(user_id=str(user_id)), user_id,
        )
        return node

    async def create_voting_card_nodes(self, room_id, user_id) -> list[CanvasNode]:
        """One card per deck entry. No-op if the user's first card already exists."""
        first = await self.store.find_one(
            CanvasNode, room_id, node_id=voting_card_node_id(user_id, 0),
        )
        if first is not None:
            return []
        created = []
        for index, (value, position) in enumerate(
            zip(DEFAULT_DECK, voting_card_positions(DEFAULT_DECK)),
        ):
            node, _ = await self._ensure_node(
                room_id, voting_card_node_id(user_id, index),
                NodeType.VOTING_CARD, position,
                VotingCardNodeData(card_value=value, user_id=str(user_id), index=index),
                user_id,
            )
            created.append(node)
        return created

    async def upsert_results_node(self, room_id) -> CanvasNode:
        node, _ = await self._ensure_node(
            room_id, RESULTS_NODE_ID, NodeType.RESULTS, RESULTS_POSITION,
            ResultsNodeData(),
        )
        return node

    async def upsert_story_node(
        self, room_id, title: str, description: str = "", user_id=None,
    ) -> CanvasNode:
        await self._require_room(room_id)
        existing = await self.store.find_one(
            CanvasNode, room_id, node_id=STORY_NODE_ID,
        )
        if existing is None:
            story = StoryNodeData(
                title=title, description=description, story_id=STORY_NODE_ID,
            )
            node, created = await self._ensure_node(
                room_id, STORY_NODE_ID, NodeType.STORY, STORY_POSITION, story, user_id,
            )
            if created:
                await self.activity.touch(room_id)
                return node
            existing = node
        story = StoryNodeData.from_dict(existing.data)
        story.title, story.description = title, description
        node = await self.store.patch(
            existing,
            data=story.to_dict(),
            last_updated_by=user_id,
            last_updated_at=self.clock(),
        )
        await self.activity.touch(room_id)
        return node

    # ─── Removal ─────────────────────────────────────────────────

    async def remove_player_node_and_cards(self, room_id, user_id) -> int:
        """Delete the player node and every card whose payload names this user."""
        player_id = player_node_id(user_id)
        owned = [
            node for node in await self.store.list_by_room(CanvasNode, room_id)
            if node.node_id == player_id or (
                node.type == NodeType.VOTING_CARD.value
                and (node.data or {}).get("user_id") == str(user_id)
            )
        ]
        return await self._delete_nodes(owned, "remove_player_node_and_cards")

    async def remove_voting_card_nodes(self, room_id, user_id) -> int:
        cards = [
            node for node in await self.store.list_by_room(
                CanvasNode, room_id, type=NodeType.VOTING_CARD.value,
            )
            if (node.data or {}).get("user_id") == str(user_id)
        ]
        return await self._delete_nodes(cards, "remove_voting_card_nodes")

    async def _delete_nodes(self, nodes: list[CanvasNode], operation: str) -> int:
        deleted = 0
        failures: list[str] = []
        for node in nodes:
            node_id = node.node_id
            try:
                if await self.store.delete(node):
                    deleted += 1
            except StoreUnavailableError as e:
                failures.append(f"{node_id}: {e.message}")
        if failures:
            raise PartialCompletionError(
                operation, {"canvas_nodes": deleted}, failures,
            )
        return deleted

    # ─── Node mutations ──────────────────────────────────────────

    async def update_node_position(
        self, room_id, node_id: str, position: Position, user_id,
    ) -> CanvasNode:
        node = await self.get_node(room_id, node_id)
        if node.is_locked:
            raise NodeLockedError(
                node_id, ErrorContext(room_id=str(room_id), user_id=str(user_id)),
            )
        node = await self.store.patch(
            node,
            position_x=position.x,
            position_y=position.y,
            last_updated_by=user_id,
            last_updated_at=self.clock(),
        )
        await self.activity.touch(room_id, missing_ok=True)
        return node

    async def toggle_node_lock(self, room_id, node_id: str, locked: bool) -> CanvasNode:
        node = await self.get_node(room_id, node_id)
        return await self.store.patch(
            node, is_locked=locked, last_updated_at=self.clock(),
        )

    # ─── Viewport ────────────────────────────────────────────────

    async def update_viewport(
        self, room_id, user_id, x: float, y: float, zoom: float,
    ) -> CanvasViewport:
        await self._require_room(room_id)
        now = self.clock()
        existing = await self.store.find_one(CanvasViewport, room_id, user_id=user_id)
        if existing is not None:
            return await self.store.patch(
                existing, x=x, y=y, zoom=zoom, last_updated_at=now,
            )
        viewport, created = await self.store.insert_unique(
            CanvasViewport(
                room_id=room_id, user_id=user_id,
                x=x, y=y, zoom=zoom, last_updated_at=now,
            ),
            user_id=user_id,
        )
        if not created:
            viewport = await self.store.patch(
                viewport, x=x, y=y, zoom=zoom, last_updated_at=now,
            )
        return viewport

    async def get_viewports(self, room_id) -> list[CanvasViewport]:
        return await self.store.list_by_room(CanvasViewport, room_id)

    # ─── Presence ────────────────────────────────────────────────

    async def update_presence(
        self,
        room_id,
        user_id,
        cursor: Position | None = None,
        is_active: bool | None = None,
    ) -> Presence:
        """Upsert presence with last_ping=now. Omitted fields keep their stored value."""
        await self._require_room(room_id)
        now = self.clock()
        changes: dict = {"last_ping": now}
        if cursor is not None:
            changes.update(cursor_x=cursor.x, cursor_y=cursor.y)
        if is_active is not None:
            changes["is_active"] = is_active

        existing = await self.store.find_one(Presence, room_id, user_id=user_id)
        if existing is not None:
            return await self.store.patch(existing, **changes)
        presence, created = await self.store.insert_unique(
            Presence(
                room_id=room_id,
                user_id=user_id,
                cursor_x=cursor.x if cursor else None,
                cursor_y=cursor.y if cursor else None,
                is_active=True if is_active is None else is_active,
                last_ping=now,
            ),
            user_id=user_id,
        )
        if not created:
            presence = await self.store.patch(presence, **changes)
        return presence

    async def get_presence(self, room_id) -> list[Presence]:
        """Active presence records only."""
        return await self.store.list_by_room(Presence, room_id, is_active=True)

    async def mark_user_inactive(self, room_id, user_id) -> bool:
        presence = await self.store.find_one(Presence, room_id, user_id=user_id)
        if presence is None:
            return False
        await self.store.patch(presence, is_active=False, last_ping=self.clock())
        return True

    async def cleanup_inactive_presence(
        self, stale_seconds: int = PRESENCE_STALE_SECONDS,
    ) -> dict[str, int]:
        """Mark stale records inactive; purge records that were already inactive and stale."""
        cutoff = self.clock() - stale_seconds * 1000
        purged = await self.store.delete_where(
            Presence, Presence.last_ping < cutoff, Presence.is_active.is_(False),
        )
        marked = await self.store.update_where(
            Presence, Presence.last_ping < cutoff, Presence.is_active.is_(True),
            is_active=False,
        )
        logger.info(
            f"Presence sweep: {marked} marked inactive, {purged} purged",
            extra={"operation": "cleanup_inactive_presence",
                   "counts": {"marked_inactive": marked, "purged": purged}},
        )
        return {"marked_inactive": marked, "purged": purged}
