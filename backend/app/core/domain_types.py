"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Timestamps are server epoch milliseconds (EpochMs) from a single server clock
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: persisted and serialized as plain strings (JSON columns, API payloads)
"""

from enum import Enum
from typing import NewType


# ─── Value Types ─────────────────────────────────────────────────

EpochMs = NewType("EpochMs", int)  # server clock, milliseconds


# ─── Enums ───────────────────────────────────────────────────────

class RoomType(str, Enum):
    """Room flavours. Every room created today is a canvas room."""
    CANVAS = "canvas"


class NodeType(str, Enum):
    """Canvas node discriminator — maps to the `type` column of canvas_nodes."""
    PLAYER = "player"
    SESSION = "session"
    TIMER = "timer"
    VOTING_CARD = "votingCard"
    RESULTS = "results"
    STORY = "story"


class TimerAction(str, Enum):
    """Timer state machine inputs."""
    START = "start"
    PAUSE = "pause"
    RESET = "reset"


class AgreementLevel(str, Enum):
    """Consensus classification produced by vote analysis."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ─── Deck ────────────────────────────────────────────────────────

DEFAULT_DECK: tuple[str, ...] = ("0", "1", "2", "3", "5", "8", "13", "21", "?")
UNKNOWN_CARD: str = "?"
