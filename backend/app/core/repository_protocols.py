"""Boundary Protocols — structural contracts for records passed from shell into core.

Invariants:
    - Core NEVER imports from models/ or infrastructure/ — dependency arrows point inward only
    - Core functions accept anything shaped like these records (ORM rows, test doubles)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Attribute names mirror the ORM columns so ORM rows satisfy them without adapters
"""

from typing import Protocol
from uuid import UUID


class UserLike(Protocol):
    """Structural contract for a room participant."""
    id: UUID
    room_id: UUID
    name: str
    is_spectator: bool


class VoteLike(Protocol):
    """Structural contract for a vote. card_label None means 'not yet voted'."""
    id: UUID
    room_id: UUID
    user_id: UUID
    card_label: str | None
    card_value: float | None
    card_icon: str | None
