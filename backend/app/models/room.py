"""Room ORM — the aggregate root of a planning-poker session.

Invariants:
    - id is UUID primary key
    - is_game_over False means votes are hidden on every read path
    - last_activity_at is monotonically non-decreasing (only moved forward by
      RoomLifecycle.update_activity's conditional UPDATE)
    - Timestamps are server epoch milliseconds

Design Decisions:
    - No ORM relationships to children: cascades are explicit ordered deletes so partial
      completion is observable and re-runnable
    - Index on last_activity_at: the inactivity sweep is a range scan
"""

import uuid

from sqlalchemy import String, Boolean, BigInteger
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Room(Base):
    """Room aggregate root — owns users, votes, canvas nodes, viewports and presence."""
    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    voting_categorized: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    auto_complete_voting: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    room_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="canvas",
    )
    is_game_over: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_activity_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, index=True,
    )
