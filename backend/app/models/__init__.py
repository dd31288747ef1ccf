"""ORM Models — SQLAlchemy declarative models for the entity store.

Invariants:
    - All models inherit from Base (db/base.py)
    - Room is the root; every other entity is scoped by room_id
    - Child tables carry room_id as an indexed column, not a database foreign key:
      cascades are ordered idempotent deletes in services/, leftovers are swept as orphans

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from app.models.room import Room  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.vote import Vote  # noqa: F401
from app.models.canvas_node import CanvasNode  # noqa: F401
from app.models.canvas_viewport import CanvasViewport  # noqa: F401
from app.models.presence import Presence  # noqa: F401
