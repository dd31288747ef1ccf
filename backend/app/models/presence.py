"""Presence ORM — cursor and liveness per (room, user).

Invariants:
    - Unique (room_id, user_id), upserted on every ping
    - Stale after PRESENCE_STALE_SECONDS without a ping (see CanvasNodeManager)

Design Decisions:
    - last_ping indexed: the staleness sweep is a range scan across all rooms
"""

import uuid

from sqlalchemy import Float, Boolean, BigInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Presence(Base):
    __tablename__ = "presence"
    __table_args__ = (UniqueConstraint("room_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    cursor_x: Mapped[float | None] = mapped_column(Float, nullable=True)
    cursor_y: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_ping: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
