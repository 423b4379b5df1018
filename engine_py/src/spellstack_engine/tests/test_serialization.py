"""
Redacted views and state snapshots.
"""

import orjson
from spellstack_engine.engine import apply_move, create_game
from spellstack_engine.models import Move
from spellstack_engine.serialization import (
    deserialize_state, redacted_view, serialize_state, state_to_dict
)

PLAYERS = [
    {"id": "p1", "name": "Alice"},
    {"id": "p2", "name": "Bob"},
    {"id": "p3", "name": "Carol", "is_bot": True},
]


def test_view_hides_other_hands():
    state = create_game(PLAYERS, "view")
    view = redacted_view(state, "p2")

    assert view["player_hands"]["p2"]["cards"] == [c.to_dict() for c in state.player_hands["p2"]]
    assert view["your_hand"] == view["player_hands"]["p2"]["cards"]
    for other in ("p1", "p3"):
        assert view["player_hands"][other] == {"count": 7}


def test_view_hides_draw_pile_and_seed():
    state = create_game(PLAYERS, "view")
    view = redacted_view(state, "p1")

    assert "draw_pile" not in view
    assert "seed" not in view
    assert view["draw_pile_count"] == len(state.draw_pile)
    assert view["top_card"] == state.top_card.to_dict()
    assert view["current_color"] == state.current_color.value

    payload = orjson.dumps(view).decode()
    for card in state.draw_pile:
        assert f'"{card.id}"' not in payload


def test_spectator_view_has_no_cards():
    state = create_game(PLAYERS, "view")
    view = redacted_view(state)

    assert "your_hand" not in view
    assert all(set(hand) == {"count"} for hand in view["player_hands"].values())


def test_last_drawn_card_only_for_drawer(make_state):
    state = make_state({"p1": ["g7"], "p2": ["b1"]}, top="r3", draw_pile=["r9"])
    drawn = apply_move(state, Move.draw_card())

    assert redacted_view(drawn, "p1")["last_drawn_card"]["id"] == "r9"
    assert "last_drawn_card" not in redacted_view(drawn, "p2")
    assert "last_drawn_card" not in redacted_view(drawn)


def test_view_does_not_modify_state():
    state = create_game(PLAYERS, "view")
    before = state_to_dict(state)
    redacted_view(state, "p1")
    assert state_to_dict(state) == before


def test_snapshot_round_trip():
    state = create_game(PLAYERS, "snapshot", {"stack_draw_cards": False})
    payload = serialize_state(state)

    data = orjson.loads(payload)
    assert data["version"] == "1.0.0"
    assert deserialize_state(payload) == state
