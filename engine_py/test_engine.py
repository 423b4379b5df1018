#!/usr/bin/env python3
"""Simple test to verify the SpellStack engine plays a full round"""

from spellstack_engine.bots.heuristic import HeuristicBot
from spellstack_engine.engine import (
    apply_automatic_draw_cards, apply_move, create_game, is_terminal, score
)
from spellstack_engine.shuffle import validate_deck_integrity

MAX_TURNS = 1000


def test_basic_game():
    """Play a bot-vs-bot round to the end"""
    print("🧪 Testing SpellStack Engine...")

    players = [
        {"id": "easy", "name": "Easy Bot", "is_bot": True},
        {"id": "medium", "name": "Medium Bot", "is_bot": True},
        {"id": "hard", "name": "Hard Bot", "is_bot": True},
    ]
    bots = {p["id"]: HeuristicBot(p["id"], p["id"]) for p in players}

    state = create_game(players, "smoke-test")
    print(f"✅ Created game {state.id}, top card {state.top_card.id} ({state.current_color.value})")

    turns = 0
    while not is_terminal(state) and turns < MAX_TURNS:
        move = bots[state.current_player_id].choose_action(state)
        state = apply_automatic_draw_cards(apply_move(state, move))
        assert validate_deck_integrity(state)
        turns += 1

    print(f"✅ Played {turns} moves, phase: {state.phase.value}")
    for player in state.players:
        print(f"✅ {player.name} holds {player.hand_size} cards")

    if is_terminal(state):
        result = score(state)
        print(f"🏆 Winner: {result.winner}, scores: {result.scores}")
        assert result.winner is not None

    print("🎉 All tests passed! Engine is working correctly.")


if __name__ == "__main__":
    test_basic_game()
