"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - EpochMs is a plain int at runtime
    - Enums serialize to the strings persisted in the store
    - The default deck ends with the unknown card
"""

from app.core.domain_types import (
    EpochMs,
    RoomType, NodeType, TimerAction, AgreementLevel,
    DEFAULT_DECK, UNKNOWN_CARD,
)


def test_epoch_ms_is_an_int():
    assert EpochMs(5) == 5
    assert isinstance(EpochMs(5), int)


def test_node_type_values_match_persisted_strings():
    assert {t.value for t in NodeType} == {
        "player", "session", "timer", "votingCard", "results", "story",
    }


def test_room_and_timer_enums():
    assert RoomType.CANVAS.value == "canvas"
    assert [a.value for a in TimerAction] == ["start", "pause", "reset"]
    assert AgreementLevel("medium") is AgreementLevel.MEDIUM


def test_default_deck():
    assert DEFAULT_DECK == ("0", "1", "2", "3", "5", "8", "13", "21", "?")
    assert DEFAULT_DECK[-1] == UNKNOWN_CARD
