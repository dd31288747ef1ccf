"""Voting Engine — cast, withdraw and evaluate votes.

Invariants:
    - One vote per (room_id, user_id): pick_card is find-or-create-or-update
    - pick_card and remove_card require the user to belong to the room
    - remove_card on a missing vote is a no-op, not an error
    - Sanitization happens on read (core/vote_visibility.py), never at write time
    - Analysis is only available once the room is revealed
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError, InvalidStateError, ErrorContext
from app.core.vote_analysis import VoteAnalysis, analyze_votes
from app.core.vote_visibility import are_all_votes_in, sanitize_votes
from app.infrastructure.clock import Clock, server_now_ms
from app.infrastructure.entity_store import EntityStore
from app.models.room import Room
from app.models.user import User
from app.models.vote import Vote
from app.services.room_activity import RoomActivity


class VotingEngine:
    """Per-user ballots and the completeness check."""

    def __init__(self, db: AsyncSession, clock: Clock = server_now_ms):
        self.store = EntityStore(db)
        self.activity = RoomActivity(db, clock)

    async def _require_member(self, room_id, user_id) -> User:
        user = await self.store.get(User, user_id)
        if user is None or user.room_id != room_id:
            raise ResourceNotFoundError(
                "User", str(user_id),
                ErrorContext(room_id=str(room_id), user_id=str(user_id)),
            )
        return user

    async def pick_card(
        self,
        room_id,
        user_id,
        card_label: str,
        card_value: float | None,
        card_icon: str | None = None,
    ) -> Vote:
        await self._require_member(room_id, user_id)
        await self.activity.touch(room_id)
        card = {
            "card_label": card_label,
            "card_value": card_value,
            "card_icon": card_icon,
        }
        existing = await self.store.find_one(Vote, room_id, user_id=user_id)
        if existing is not None:
            return await self.store.patch(existing, **card)
        vote, created = await self.store.insert_unique(
            Vote(room_id=room_id, user_id=user_id, **card), user_id=user_id,
        )
        if not created:
            vote = await self.store.patch(vote, **card)
        return vote

    async def remove_card(self, room_id, user_id) -> bool:
        await self._require_member(room_id, user_id)
        removed = await self.store.delete_where(
            Vote, Vote.room_id == room_id, Vote.user_id == user_id,
        )
        await self.activity.touch(room_id)
        return removed > 0

    async def are_all_votes_in(self, room_id) -> bool:
        if await self.store.get(Room, room_id) is None:
            raise ResourceNotFoundError("Room", str(room_id))
        users = await self.store.list_by_room(User, room_id)
        votes = await self.store.list_by_room(Vote, room_id)
        return are_all_votes_in(users, votes)

    async def get_vote_analysis(self, room_id) -> VoteAnalysis:
        room = await self.store.get(Room, room_id)
        if room is None:
            raise ResourceNotFoundError("Room", str(room_id))
        if not room.is_game_over:
            raise InvalidStateError(
                "Votes are hidden until cards are revealed",
                ErrorContext(room_id=str(room_id)),
            )
        users = await self.store.list_by_room(User, room_id)
        votes = await self.store.list_by_room(Vote, room_id)
        return analyze_votes(sanitize_votes(votes, room.is_game_over), users)
