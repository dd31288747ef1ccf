"""CanvasViewport ORM — per-user pan/zoom state, upserted on every change."""

import uuid

from sqlalchemy import Float, BigInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class CanvasViewport(Base):
    __tablename__ = "canvas_viewports"
    __table_args__ = (UniqueConstraint("room_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    zoom: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    last_updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
