"""
Shared fixtures: hand-built game states for rule tests.
"""

import pytest

from spellstack_engine.models import (
    Card, CardColor, CardType, Direction, GamePhase, GameState, Player
)
from spellstack_engine.rules import RuleConfig

COLORS = {"r": CardColor.RED, "g": CardColor.GREEN, "b": CardColor.BLUE, "y": CardColor.YELLOW}
ACTIONS = {"skip": CardType.SKIP, "rev": CardType.REVERSE, "d2": CardType.DRAW_TWO}


def make_card(code: str) -> Card:
    """
    Build a card from a short code, also used as its id.

    "r5" red five, "g-skip", "b-rev", "y-d2", "wild", "wd4" (suffixes like
    "wild#2" give distinct ids).
    """
    base = code.split("#")[0]
    if base == "wild":
        return Card(code, CardColor.WILD, CardType.WILD)
    if base == "wd4":
        return Card(code, CardColor.WILD, CardType.WILD_DRAW_FOUR)
    color = COLORS[base[0]]
    if "-" in base:
        return Card(code, color, ACTIONS[base.split("-")[1]])
    return Card(code, color, CardType.NUMBER, int(base[1:]))


@pytest.fixture
def card():
    return make_card


@pytest.fixture
def make_state():
    def _make_state(
        hands,
        top="r3",
        current_color=None,
        draw_pile=(),
        discard=(),
        current=None,
        direction=Direction.CLOCKWISE,
        draw_count=0,
        **settings
    ) -> GameState:
        top_card = make_card(top)
        player_hands = {pid: [make_card(c) for c in cards] for pid, cards in hands.items()}
        players = [
            Player(id=pid, name=pid.title(), hand_size=len(cards))
            for pid, cards in player_hands.items()
        ]
        return GameState(
            id="test-game",
            seed="test",
            players=players,
            current_player_id=current or players[0].id,
            top_card=top_card,
            current_color=current_color or top_card.color,
            phase=GamePhase.PLAYING,
            direction=direction,
            draw_pile=[make_card(c) for c in draw_pile],
            discard_pile=[make_card(c) for c in discard] + [top_card],
            player_hands=player_hands,
            draw_count=draw_count,
            settings=RuleConfig(**settings),
        )

    return _make_state
