"""Vote Visibility — sanitization before reveal and the completeness rule."""

from types import SimpleNamespace
from uuid import uuid4

from app.core.vote_visibility import sanitize_vote, sanitize_votes, are_all_votes_in

ROOM = uuid4()


def _vote(user_id, label="5", value=5.0, icon=None):
    return SimpleNamespace(
        id=uuid4(), room_id=ROOM, user_id=user_id,
        card_label=label, card_value=value, card_icon=icon,
    )


def _user(is_spectator=False):
    return SimpleNamespace(id=uuid4(), room_id=ROOM, name="n", is_spectator=is_spectator)


def test_hidden_votes_have_no_card_keys():
    sanitized = sanitize_vote(_vote(uuid4(), icon="coffee"), is_game_over=False)
    assert sanitized["has_voted"] is True
    for key in ("card_label", "card_value", "card_icon"):
        assert key not in sanitized


def test_has_voted_tracks_label_presence():
    sanitized = sanitize_vote(_vote(uuid4(), label=None, value=None), is_game_over=False)
    assert sanitized["has_voted"] is False


def test_revealed_votes_pass_through_unmodified():
    vote = _vote(uuid4(), label="13", value=13.0, icon="rocket")
    sanitized = sanitize_votes([vote], is_game_over=True)[0]
    assert sanitized["card_label"] == "13"
    assert sanitized["card_value"] == 13.0
    assert sanitized["card_icon"] == "rocket"
    assert sanitized["user_id"] == str(vote.user_id)


def test_spectators_do_not_block_completeness():
    voter, spectator = _user(), _user(is_spectator=True)
    assert are_all_votes_in([voter, spectator], [_vote(voter.id)]) is True


def test_missing_participant_vote_blocks_completeness():
    a, b = _user(), _user()
    assert are_all_votes_in([a, b], [_vote(a.id)]) is False


def test_room_without_participants_is_complete():
    assert are_all_votes_in([_user(is_spectator=True)], []) is True
