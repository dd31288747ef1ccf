"""CanvasNode ORM — a positioned, typed canvas element shared by every client.

Invariants:
    - Unique (room_id, node_id): every creation path is check-then-insert, and a
      concurrent duplicate insert resolves to the existing row
    - type is a NodeType value; data holds the matching payload (core/node_payloads.py)
    - is_locked True blocks position writes, not lock toggles
    - last_updated_at is server epoch milliseconds

Design Decisions:
    - position split into two float columns: queryable, no JSON merge needed on drag
    - data as JSON: each NodeType payload is small and read whole
    - (room_id, type) index: player counting and card scans stay within one room
"""

import uuid

from sqlalchemy import String, Float, Boolean, BigInteger, JSON, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class CanvasNode(Base):
    __tablename__ = "canvas_nodes"
    __table_args__ = (
        UniqueConstraint("room_id", "node_id"),
        Index("ix_canvas_nodes_room_type", "room_id", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    node_id: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    position_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    last_updated_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    last_updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True,
    )

