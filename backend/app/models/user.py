"""User ORM — a participant (or spectator) of one room.

Invariants:
    - Always scoped to a room (room_id)
    - Spectators never get voting-card nodes and are excluded from completeness checks
"""

import uuid

from sqlalchemy import String, Boolean, BigInteger, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_room_joined", "room_id", "joined_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_spectator: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    joined_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
