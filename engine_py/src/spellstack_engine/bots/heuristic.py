"""
Heuristic bot implementation with three difficulty levels.
"""

import dataclasses
from typing import Dict, List, Optional

from .base import BaseBot
from ..constants import DISRUPTIVE_TYPES
from ..models import SUIT_COLORS, AIDifficulty, Card, CardColor, GameState, Move, MoveType
from ..shuffle import RNG
from ..validate import legal_moves


def choose_ai_move(
    state: GameState,
    player_id: str,
    difficulty: AIDifficulty = AIDifficulty.MEDIUM,
    rng: Optional[RNG] = None
) -> Optional[Move]:
    """
    Pick a move for a computer player from its legal moves.

    Args:
        state: Current game state
        player_id: Player to move for
        difficulty: easy (random), medium or hard heuristics
        rng: Optional RNG; by default one is seeded from the game seed, the
            player id and the discard pile length, so decisions replay exactly

    Returns:
        The chosen move, or None when the player has no legal moves
    """
    moves = legal_moves(state, player_id)
    if not moves:
        return None

    current_rng = rng or RNG(f"{state.seed}{player_id}{len(state.discard_pile)}")
    difficulty = AIDifficulty(difficulty)

    if difficulty == AIDifficulty.MEDIUM:
        return _choose_medium_move(state, player_id, moves, current_rng)
    if difficulty == AIDifficulty.HARD:
        return _choose_hard_move(state, player_id, moves, current_rng)
    return current_rng.choice(moves)


def _card_for(move: Move, hand: List[Card]) -> Optional[Card]:
    if move.type != MoveType.PLAY_CARD:
        return None
    return next((card for card in hand if card.id == move.card_id), None)


def _play_moves_where(moves: List[Move], hand: List[Card], predicate) -> List[Move]:
    selected = []
    for move in moves:
        card = _card_for(move, hand)
        if card is not None and predicate(card):
            selected.append(move)
    return selected


def _choose_medium_move(state: GameState, player_id: str, moves: List[Move], rng: RNG) -> Move:
    hand = state.hand_of(player_id)

    # Going out beats everything
    if len(hand) == 1:
        play_moves = [m for m in moves if m.type == MoveType.PLAY_CARD]
        if play_moves:
            return rng.choice(play_moves)

    action_moves = _play_moves_where(moves, hand, lambda c: c.type in DISRUPTIVE_TYPES)
    if action_moves:
        return rng.choice(action_moves)

    color_moves = _play_moves_where(moves, hand, lambda c: c.color == state.current_color)
    if color_moves:
        return rng.choice(color_moves)

    wild_moves = _play_moves_where(moves, hand, lambda c: c.is_wild)
    if wild_moves:
        best_color = best_color_choice(hand, state.current_color)
        return dataclasses.replace(rng.choice(wild_moves), chosen_color=best_color)

    play_moves = [m for m in moves if m.type == MoveType.PLAY_CARD]
    if play_moves:
        return rng.choice(play_moves)

    return rng.choice(moves)


def _choose_hard_move(state: GameState, player_id: str, moves: List[Move], rng: RNG) -> Move:
    medium_move = _choose_medium_move(state, player_id, moves, rng)

    opponents = [p for p in state.players if p.id != player_id]
    if opponents and min(p.hand_size for p in opponents) <= 2:
        hand = state.hand_of(player_id)
        disruptive = _play_moves_where(moves, hand, lambda c: c.type in DISRUPTIVE_TYPES)
        if disruptive:
            return rng.choice(disruptive)

    return medium_move


def best_color_choice(hand: List[Card], current_color: CardColor) -> CardColor:
    """Color held most often in hand; ties keep the active color."""
    counts: Dict[CardColor, int] = {color: 0 for color in SUIT_COLORS}
    for card in hand:
        if card.color in counts:
            counts[card.color] += 1

    best_color = current_color
    max_count = counts.get(current_color, 0)
    for color in SUIT_COLORS:
        if counts[color] > max_count:
            max_count = counts[color]
            best_color = color
    return best_color


class HeuristicBot(BaseBot):
    """
    Bot that plays through choose_ai_move.

    Strategy (medium):
    - Play the last card when possible
    - Prefer skip, reverse, +2 and +4 to disrupt the next player
    - Otherwise keep the active color going
    - Name the color it holds most when playing a wild
    Hard additionally goes all-in on disruption when an opponent is close to
    going out.
    """

    def __init__(self, player_id: str, difficulty: AIDifficulty = AIDifficulty.MEDIUM):
        super().__init__(player_id)
        self.difficulty = AIDifficulty(difficulty)

    def choose_action(self, state: GameState) -> Optional[Move]:
        if not self.is_my_turn(state):
            return None

        move = choose_ai_move(state, self.player_id, self.difficulty)
        if move is None:
            # No legal moves on our own turn: take a card
            return Move.draw_card()
        return move
