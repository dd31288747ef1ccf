"""Canvas Schemas — node, viewport and presence payloads.

Invariants:
    - CanvasNodeResponse.id is the logical node_id (player-<user>, timer, ...)
    - Viewport zoom is strictly positive
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.canvas_layout import Position
from app.core.domain_types import NodeType
from app.models.canvas_node import CanvasNode


class PositionModel(BaseModel):
    x: float
    y: float

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class NodePositionUpdate(BaseModel):
    position: PositionModel
    user_id: UUID


class NodeLockUpdate(BaseModel):
    locked: bool


class CanvasNodeResponse(BaseModel):
    id: str
    room_id: UUID
    type: NodeType
    position: PositionModel
    data: dict
    is_locked: bool
    last_updated_by: UUID | None = None
    last_updated_at: int

    @classmethod
    def from_node(cls, node: CanvasNode) -> "CanvasNodeResponse":
        return cls(
            id=node.node_id,
            room_id=node.room_id,
            type=NodeType(node.type),
            position=PositionModel(x=node.position_x, y=node.position_y),
            data=node.data or {},
            is_locked=node.is_locked,
            last_updated_by=node.last_updated_by,
            last_updated_at=node.last_updated_at,
        )


class StoryUpdate(BaseModel):
    title: str = Field(max_length=300)
    description: str = Field("", max_length=5_000)
    user_id: UUID | None = None


class ViewportUpdate(BaseModel):
    x: float
    y: float
    zoom: float = Field(gt=0)


class ViewportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    room_id: UUID
    user_id: UUID
    x: float
    y: float
    zoom: float
    last_updated_at: int


class PresenceUpdate(BaseModel):
    cursor: PositionModel | None = None
    is_active: bool | None = None


class PresenceResponse(BaseModel):
    room_id: UUID
    user_id: UUID
    cursor: PositionModel | None = None
    is_active: bool
    last_ping: int

    @classmethod
    def from_record(cls, presence) -> "PresenceResponse":
        cursor = None
        if presence.cursor_x is not None and presence.cursor_y is not None:
            cursor = PositionModel(x=presence.cursor_x, y=presence.cursor_y)
        return cls(
            room_id=presence.room_id,
            user_id=presence.user_id,
            cursor=cursor,
            is_active=presence.is_active,
            last_ping=presence.last_ping,
        )
