"""Initial schema — rooms, users, votes, canvas_nodes, canvas_viewports, presence.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("voting_categorized", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("auto_complete_voting", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("room_type", sa.String(20), nullable=False, server_default="canvas"),
        sa.Column("is_game_over", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("last_activity_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_rooms_last_activity_at", "rooms", ["last_activity_at"])

    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("room_id", UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_spectator", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("joined_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_users_room_id", "users", ["room_id"])
    op.create_index("ix_users_room_joined", "users", ["room_id", "joined_at"])

    op.create_table(
        "votes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("room_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("card_label", sa.String(20), nullable=True),
        sa.Column("card_value", sa.Float, nullable=True),
        sa.Column("card_icon", sa.String(50), nullable=True),
        sa.UniqueConstraint("room_id", "user_id", name="uq_votes_room_id_user_id"),
    )
    op.create_index("ix_votes_room_id", "votes", ["room_id"])
    op.create_index("ix_votes_user_id", "votes", ["user_id"])

    op.create_table(
        "canvas_nodes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("room_id", UUID(as_uuid=True), nullable=False),
        sa.Column("node_id", sa.String(120), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("position_x", sa.Float, nullable=False, server_default="0"),
        sa.Column("position_y", sa.Float, nullable=False, server_default="0"),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("last_updated_by", UUID(as_uuid=True), nullable=True),
        sa.Column("last_updated_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("room_id", "node_id", name="uq_canvas_nodes_room_id_node_id"),
    )
    op.create_index("ix_canvas_nodes_room_id", "canvas_nodes", ["room_id"])
    op.create_index("ix_canvas_nodes_room_type", "canvas_nodes", ["room_id", "type"])
    op.create_index("ix_canvas_nodes_last_updated_at", "canvas_nodes", ["last_updated_at"])

    op.create_table(
        "canvas_viewports",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("room_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("x", sa.Float, nullable=False, server_default="0"),
        sa.Column("y", sa.Float, nullable=False, server_default="0"),
        sa.Column("zoom", sa.Float, nullable=False, server_default="1"),
        sa.Column("last_updated_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("room_id", "user_id", name="uq_canvas_viewports_room_id_user_id"),
    )
    op.create_index("ix_canvas_viewports_room_id", "canvas_viewports", ["room_id"])

    op.create_table(
        "presence",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("room_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("cursor_x", sa.Float, nullable=True),
        sa.Column("cursor_y", sa.Float, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_ping", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("room_id", "user_id", name="uq_presence_room_id_user_id"),
    )
    op.create_index("ix_presence_room_id", "presence", ["room_id"])
    op.create_index("ix_presence_last_ping", "presence", ["last_ping"])


def downgrade() -> None:
    op.drop_table("presence")
    op.drop_table("canvas_viewports")
    op.drop_table("canvas_nodes")
    op.drop_table("votes")
    op.drop_table("users")
    op.drop_table("rooms")
