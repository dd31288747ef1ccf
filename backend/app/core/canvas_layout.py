"""Canvas Layout — deterministic node ids and default positions. Pure, no IO.

Invariants:
    - Node ids are deterministic per role: player-<user>, card-<user>-<index>,
      and the singletons timer, session-current, results, story
    - Default positions depend only on their inputs (player count, deck size)
    - Player row and card row are centred on CANVAS_CENTER

Design Decisions:
    - Constants live here, not in the service: layout is presentation policy that
      tests pin without touching the store
"""

from dataclasses import dataclass

from app.core.domain_types import DEFAULT_DECK


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


CANVAS_CENTER = Position(0, 0)
TIMER_POSITION = Position(-500, -250)
SESSION_Y: int = -300
SESSION_POSITION = Position(CANVAS_CENTER.x - 140, SESSION_Y)
RESULTS_POSITION = Position(CANVAS_CENTER.x + 400, SESSION_Y + 100)
STORY_POSITION = Position(CANVAS_CENTER.x - 140, SESSION_Y - 250)
PLAYERS_Y: int = 200
PLAYER_SPACING: int = 200
VOTING_CARD_Y: int = 450
VOTING_CARD_SPACING: int = 70

TIMER_NODE_ID = "timer"
SESSION_NODE_ID = "session-current"
RESULTS_NODE_ID = "results"
STORY_NODE_ID = "story"


def player_node_id(user_id) -> str:
    return f"player-{user_id}"


def voting_card_node_id(user_id, index: int) -> str:
    return f"card-{user_id}-{index}"


def default_player_position(player_count: int) -> Position:
    """Slot for the next player given how many player nodes already exist."""
    total_width = player_count * PLAYER_SPACING
    start_x = CANVAS_CENTER.x - total_width / 2
    return Position(start_x + player_count * PLAYER_SPACING, PLAYERS_Y)


def voting_card_positions(deck: tuple[str, ...] = DEFAULT_DECK) -> list[Position]:
    """One position per card, laid out as a centred horizontal row."""
    total_width = (len(deck) - 1) * VOTING_CARD_SPACING
    start_x = CANVAS_CENTER.x - total_width / 2
    return [
        Position(start_x + index * VOTING_CARD_SPACING, VOTING_CARD_Y)
        for index in range(len(deck))
    ]
