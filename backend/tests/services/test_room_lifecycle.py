"""Room Lifecycle — creation, snapshot sanitization, reveal/reset, activity, cascade.

Invariants:
    - create_room provisions exactly the timer and session nodes
    - Snapshot votes never carry card fields before reveal
    - last_activity_at never moves backwards
    - cascade_delete removes only the target room's records
"""

import pytest
from uuid import uuid4

from sqlalchemy import select

from app.core.canvas_layout import Position
from app.core.errors import ResourceNotFoundError
from app.models.canvas_node import CanvasNode
from app.models.canvas_viewport import CanvasViewport
from app.models.presence import Presence
from app.models.room import Room
from app.models.user import User
from app.models.vote import Vote
from app.services.canvas_nodes import CanvasNodeManager
from app.services.room_lifecycle import RoomLifecycle
from app.services.user_membership import UserMembership
from app.services.voting import VotingEngine


@pytest.fixture
def rooms(test_db, clock):
    return RoomLifecycle(test_db, clock)


@pytest.fixture
def members(test_db, clock):
    return UserMembership(test_db, clock)


@pytest.fixture
def voting(test_db, clock):
    return VotingEngine(test_db, clock)


async def _count(db, model, **filters) -> int:
    query = select(model)
    for column, value in filters.items():
        query = query.where(getattr(model, column) == value)
    result = await db.execute(query)
    return len(result.scalars().all())


async def test_create_room_defaults_and_permanent_nodes(rooms, test_db, clock):
    room = await rooms.create_room("Sprint 42")
    assert room.is_game_over is False
    assert room.voting_categorized is True
    assert room.auto_complete_voting is False
    assert room.room_type == "canvas"
    assert room.created_at == room.last_activity_at == clock()

    nodes = await rooms.canvas.get_canvas_nodes(room.id)
    assert sorted(n.node_id for n in nodes) == ["session-current", "timer"]


async def test_snapshot_hides_votes_until_reveal(rooms, members, voting):
    room = await rooms.create_room("Hidden")
    alice = await members.join_room(room.id, "Alice")
    await voting.pick_card(room.id, alice.id, "8", 8, "rocket")

    snapshot = await rooms.get_room_with_related_data(room.id)
    vote = snapshot["votes"][0]
    assert vote["has_voted"] is True
    assert "card_label" not in vote
    assert "card_value" not in vote
    assert "card_icon" not in vote

    await rooms.show_cards(room.id)
    revealed = (await rooms.get_room_with_related_data(room.id))["votes"][0]
    assert revealed["card_label"] == "8"
    assert revealed["card_value"] == 8
    assert revealed["card_icon"] == "rocket"


async def test_snapshot_of_missing_room_is_none(rooms):
    assert await rooms.get_room_with_related_data(uuid4()) is None


async def test_snapshot_lists_users_in_join_order(rooms, members, clock):
    room = await rooms.create_room("Order")
    await members.join_room(room.id, "First")
    clock.advance(seconds=1)
    await members.join_room(room.id, "Second")
    snapshot = await rooms.get_room_with_related_data(room.id)
    assert [u.name for u in snapshot["users"]] == ["First", "Second"]


async def test_show_cards_creates_results_node_once(rooms):
    room = await rooms.create_room("Reveal")
    await rooms.show_cards(room.id)
    await rooms.show_cards(room.id)
    nodes = await rooms.canvas.get_canvas_nodes(room.id)
    assert [n.node_id for n in nodes].count("results") == 1
    assert (await rooms.get_room(room.id)).is_game_over is True


async def test_reset_deletes_votes_but_keeps_nodes(rooms, members, voting, test_db):
    room = await rooms.create_room("Reset")
    alice = await members.join_room(room.id, "Alice")
    await voting.pick_card(room.id, alice.id, "3", 3)
    await rooms.show_cards(room.id)
    nodes_before = len(await rooms.canvas.get_canvas_nodes(room.id))

    deleted = await rooms.reset_game(room.id)

    assert deleted == 1
    assert (await rooms.get_room(room.id)).is_game_over is False
    assert await _count(test_db, Vote, room_id=room.id) == 0
    assert len(await rooms.canvas.get_canvas_nodes(room.id)) == nodes_before


async def test_activity_moves_forward_only(rooms, clock):
    room = await rooms.create_room("Activity")
    start = clock()
    clock.advance(seconds=10)
    assert await rooms.update_activity(room.id) is True
    assert (await rooms.get_room(room.id)).last_activity_at == start + 10_000

    clock.now_ms = start  # a slow caller with an older reading
    assert await rooms.update_activity(room.id) is False
    assert (await rooms.get_room(room.id)).last_activity_at == start + 10_000


async def test_activity_on_missing_room(rooms):
    with pytest.raises(ResourceNotFoundError):
        await rooms.update_activity(uuid4())
    assert await rooms.update_activity(uuid4(), missing_ok=True) is False


async def test_mutations_bump_activity(rooms, members, voting, clock):
    room = await rooms.create_room("Bumps")
    user = await members.join_room(room.id, "Alice")
    for action in (
        lambda: voting.pick_card(room.id, user.id, "5", 5),
        lambda: voting.remove_card(room.id, user.id),
        lambda: rooms.show_cards(room.id),
        lambda: rooms.reset_game(room.id),
        lambda: rooms.canvas.update_node_position(
            room.id, "timer", Position(1, 1), user.id,
        ),
        lambda: members.edit_user(user.id, name="Alicia"),
    ):
        now = clock.advance(seconds=1)
        await action()
        assert (await rooms.get_room(room.id)).last_activity_at == now


async def test_delete_room_cascades_only_that_room(rooms, members, voting, test_db):
    doomed = await rooms.create_room("Doomed")
    kept = await rooms.create_room("Kept")
    canvas = CanvasNodeManager(test_db, rooms.clock)
    for room in (doomed, kept):
        user = await members.join_room(room.id, "Alice")
        await voting.pick_card(room.id, user.id, "5", 5)
        await canvas.update_viewport(room.id, user.id, 10, 20, 1.5)
        await canvas.update_presence(room.id, user.id)

    counts = await rooms.delete_room(doomed.id)

    assert counts["rooms"] == 1
    assert counts["users"] == 1
    assert counts["votes"] == 1
    assert counts["viewports"] == 1
    assert counts["presence"] == 1
    assert counts["canvas_nodes"] == 2 + 1 + 9  # timer, session, player, cards
    for model in (User, Vote, CanvasNode, CanvasViewport, Presence):
        assert await _count(test_db, model, room_id=doomed.id) == 0
        assert await _count(test_db, model, room_id=kept.id) > 0
    assert await _count(test_db, Room, id=kept.id) == 1


async def test_delete_missing_room_is_not_found(rooms):
    with pytest.raises(ResourceNotFoundError):
        await rooms.delete_room(uuid4())


async def test_cascade_is_safe_to_rerun(rooms):
    room = await rooms.create_room("Twice")
    await rooms.cascade_delete(room.id)
    counts = await rooms.cascade_delete(room.id)
    assert set(counts.values()) == {0}
