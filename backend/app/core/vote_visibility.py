"""Vote Visibility — read-boundary sanitization and completeness rule. Pure, no IO.

Invariants:
    - Before reveal (is_game_over False) a sanitized vote has NO card_label,
      card_value or card_icon keys at all — only has_voted
    - has_voted == (card_label is not None), computed from the raw vote before stripping
    - After reveal the raw card fields pass through unmodified
    - are_all_votes_in ignores spectators; a room with no participants is complete

Design Decisions:
    - Keys are omitted rather than nulled so no serializer can leak them by accident
    - Applied on every read path (room snapshot, SSE stream, analysis), never at write time
"""

from typing import Iterable

from app.core.repository_protocols import UserLike, VoteLike


def sanitize_vote(vote: VoteLike, is_game_over: bool) -> dict:
    sanitized = {
        "id": str(vote.id),
        "room_id": str(vote.room_id),
        "user_id": str(vote.user_id),
        "has_voted": vote.card_label is not None,
    }
    if is_game_over:
        sanitized["card_label"] = vote.card_label
        sanitized["card_value"] = vote.card_value
        sanitized["card_icon"] = vote.card_icon
    return sanitized


def sanitize_votes(votes: Iterable[VoteLike], is_game_over: bool) -> list[dict]:
    return [sanitize_vote(v, is_game_over) for v in votes]


def are_all_votes_in(users: Iterable[UserLike], votes: Iterable[VoteLike]) -> bool:
    """True iff every non-spectator user has a vote record."""
    voted_user_ids = {v.user_id for v in votes}
    return all(u.id in voted_user_ids for u in users if not u.is_spectator)
