"""Node Payloads — tagged union of per-type canvas node data.

Invariants:
    - Every NodeType has exactly one payload class (PAYLOAD_TYPES is exhaustive)
    - to_dict() output is what gets persisted in canvas_nodes.data (JSON)
    - from_dict() tolerates missing keys (older rows) by falling back to defaults
    - Unknown node types raise ValueError — never silently treated as an untyped blob

Design Decisions:
    - Dataclasses over pydantic here: core stays free of validation-framework concerns,
      schemas/ does boundary validation
    - User ids stored as strings inside JSON payloads (JSON has no UUID type)
"""

from dataclasses import dataclass, asdict, field
from typing import Union

from app.core.domain_types import NodeType


@dataclass
class PlayerNodeData:
    user_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerNodeData":
        return cls(user_id=str(data.get("user_id", "")))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SessionNodeData:
    @classmethod
    def from_dict(cls, data: dict) -> "SessionNodeData":
        return cls()

    def to_dict(self) -> dict:
        return {}


@dataclass
class TimerNodeData:
    """Persisted timer snapshot. started_at/paused_at are server epoch ms."""
    is_running: bool = False
    started_at: int | None = None
    paused_at: int | None = None
    elapsed_seconds: float = 0.0
    last_action: str | None = None
    last_updated_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "TimerNodeData":
        return cls(
            is_running=bool(data.get("is_running", False)),
            started_at=data.get("started_at"),
            paused_at=data.get("paused_at"),
            elapsed_seconds=float(data.get("elapsed_seconds", 0) or 0),
            last_action=data.get("last_action"),
            last_updated_by=data.get("last_updated_by"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VotingCardNodeData:
    card_value: str
    user_id: str
    index: int

    @classmethod
    def from_dict(cls, data: dict) -> "VotingCardNodeData":
        card = data.get("card") or {}
        return cls(
            card_value=str(card.get("value", "")),
            user_id=str(data.get("user_id", "")),
            index=int(data.get("index", 0)),
        )

    def to_dict(self) -> dict:
        # Nested card object keeps the payload shape the canvas renderer expects
        return {
            "card": {"value": self.card_value},
            "user_id": self.user_id,
            "index": self.index,
        }


@dataclass
class ResultsNodeData:
    @classmethod
    def from_dict(cls, data: dict) -> "ResultsNodeData":
        return cls()

    def to_dict(self) -> dict:
        return {}


@dataclass
class StoryNodeData:
    title: str = ""
    description: str = ""
    story_id: str = field(default="")

    @classmethod
    def from_dict(cls, data: dict) -> "StoryNodeData":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            story_id=data.get("story_id", ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


NodePayload = Union[
    PlayerNodeData, SessionNodeData, TimerNodeData,
    VotingCardNodeData, ResultsNodeData, StoryNodeData,
]

PAYLOAD_TYPES: dict[NodeType, type] = {
    NodeType.PLAYER: PlayerNodeData,
    NodeType.SESSION: SessionNodeData,
    NodeType.TIMER: TimerNodeData,
    NodeType.VOTING_CARD: VotingCardNodeData,
    NodeType.RESULTS: ResultsNodeData,
    NodeType.STORY: StoryNodeData,
}


def parse_payload(node_type: str, data: dict | None) -> NodePayload:
    """Decode a persisted payload into its typed variant."""
    try:
        payload_cls = PAYLOAD_TYPES[NodeType(node_type)]
    except ValueError:
        raise ValueError(f"Unknown canvas node type: {node_type!r}") from None
    return payload_cls.from_dict(data or {})
