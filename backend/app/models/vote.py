"""Vote ORM — one active ballot per user per room.

Invariants:
    - Unique (room_id, user_id): find-or-create-or-update, never duplicate rows
    - card_label None means "not yet voted"
    - Raw card fields are never exposed pre-reveal (see core/vote_visibility.py)
"""

import uuid

from sqlalchemy import String, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("room_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    card_label: Mapped[str | None] = mapped_column(String(20), nullable=True)
    card_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    card_icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
