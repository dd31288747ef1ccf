"""Canvas Routes — node reads and mutations, story node, viewports and presence.

Invariants:
    - GET nodes is read-only and safe to poll
    - Position writes on locked nodes return 423 NODE_LOCKED and change nothing
    - Presence reads only return active users
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.schemas.canvas import (
    CanvasNodeResponse, NodePositionUpdate, NodeLockUpdate, StoryUpdate,
    ViewportUpdate, ViewportResponse, PresenceUpdate, PresenceResponse,
)
from app.services.canvas_nodes import CanvasNodeManager

router = APIRouter(prefix="/api/v1/rooms/{room_id}/canvas", tags=["canvas"])


@router.get("/nodes", response_model=list[CanvasNodeResponse])
async def get_canvas_nodes(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    nodes = await CanvasNodeManager(db, clock).get_canvas_nodes(room_id)
    return [CanvasNodeResponse.from_node(n) for n in nodes]


@router.post("/nodes/initialize", response_model=list[CanvasNodeResponse])
async def initialize_canvas_nodes(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create timer + session nodes. Returns only nodes created by this call."""
    nodes = await CanvasNodeManager(db, clock).initialize_canvas_nodes(room_id)
    return [CanvasNodeResponse.from_node(n) for n in nodes]


@router.patch("/nodes/{node_id}/position", response_model=CanvasNodeResponse)
async def update_node_position(
    room_id: UUID,
    node_id: str,
    body: NodePositionUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    node = await CanvasNodeManager(db, clock).update_node_position(
        room_id, node_id, body.position.to_position(), body.user_id,
    )
    return CanvasNodeResponse.from_node(node)


@router.patch("/nodes/{node_id}/lock", response_model=CanvasNodeResponse)
async def toggle_node_lock(
    room_id: UUID,
    node_id: str,
    body: NodeLockUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    node = await CanvasNodeManager(db, clock).toggle_node_lock(
        room_id, node_id, body.locked,
    )
    return CanvasNodeResponse.from_node(node)


@router.put("/story", response_model=CanvasNodeResponse)
async def upsert_story_node(
    room_id: UUID,
    body: StoryUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    node = await CanvasNodeManager(db, clock).upsert_story_node(
        room_id, body.title, body.description, body.user_id,
    )
    return CanvasNodeResponse.from_node(node)


@router.put("/viewports/{user_id}", response_model=ViewportResponse)
async def update_viewport(
    room_id: UUID,
    user_id: UUID,
    body: ViewportUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    viewport = await CanvasNodeManager(db, clock).update_viewport(
        room_id, user_id, body.x, body.y, body.zoom,
    )
    return ViewportResponse.model_validate(viewport)


@router.get("/viewports", response_model=list[ViewportResponse])
async def get_viewports(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    viewports = await CanvasNodeManager(db, clock).get_viewports(room_id)
    return [ViewportResponse.model_validate(v) for v in viewports]


@router.put("/presence/{user_id}", response_model=PresenceResponse)
async def update_presence(
    room_id: UUID,
    user_id: UUID,
    body: PresenceUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    presence = await CanvasNodeManager(db, clock).update_presence(
        room_id,
        user_id,
        cursor=body.cursor.to_position() if body.cursor else None,
        is_active=body.is_active,
    )
    return PresenceResponse.from_record(presence)


@router.get("/presence", response_model=list[PresenceResponse])
async def get_presence(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    records = await CanvasNodeManager(db, clock).get_presence(room_id)
    return [PresenceResponse.from_record(p) for p in records]
