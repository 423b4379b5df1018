"""
Card effect resolution and turn order.

These helpers mutate the state they are given. The engine only ever passes
them its own working copy, never a caller's state.
"""

import logging
from typing import Optional

from .constants import DRAW_TWO_AMOUNT, WILD_DRAW_FOUR_AMOUNT
from .errors import IllegalMoveError
from .models import Card, CardColor, CardType, Direction, GameState
from .shuffle import RNG

logger = logging.getLogger(__name__)


def advance_turn(state: GameState) -> None:
    """Move the turn one seat in the current direction."""
    current_index = state.player_index(state.current_player_id)
    step = 1 if state.direction == Direction.CLOCKWISE else -1
    count = len(state.players)
    next_index = (current_index + step + count) % count
    state.current_player_id = state.players[next_index].id


def reverse_direction(state: GameState) -> None:
    if state.direction == Direction.CLOCKWISE:
        state.direction = Direction.COUNTER_CLOCKWISE
    else:
        state.direction = Direction.CLOCKWISE


def apply_card_effect(state: GameState, card: Card, chosen_color: Optional[CardColor] = None) -> None:
    """
    Resolve the effect of a card that was just put on the discard pile.

    Args:
        state: Working state, card already on top of the discard pile
        card: The card played
        chosen_color: Color named for a wild card

    Raises:
        IllegalMoveError: If a wild card is resolved without a concrete color
    """
    if card.type == CardType.SKIP:
        # Two steps from the player who played it: the next seat loses its turn
        advance_turn(state)
        advance_turn(state)
        state.current_color = card.color
    elif card.type == CardType.REVERSE:
        reverse_direction(state)
        if len(state.players) == 2:
            # Two players: reverse acts as a skip, the advance that follows
            # lands back on the player who reversed
            advance_turn(state)
        state.current_color = card.color
    elif card.type == CardType.DRAW_TWO:
        state.draw_count += DRAW_TWO_AMOUNT
        state.current_color = card.color
    elif card.type in (CardType.WILD, CardType.WILD_DRAW_FOUR):
        if chosen_color is None or chosen_color == CardColor.WILD:
            raise IllegalMoveError("A wild card needs a color choice")
        state.current_color = chosen_color
        if card.type == CardType.WILD_DRAW_FOUR:
            state.draw_count += WILD_DRAW_FOUR_AMOUNT
    else:
        state.current_color = card.color


def reshuffle_discard_pile(state: GameState, rng: RNG) -> bool:
    """
    Turn the discard pile (minus its top card) into a new draw pile.

    Returns:
        False if there was nothing under the top card to reshuffle
    """
    if len(state.discard_pile) <= 1:
        return False

    top_card = state.discard_pile[-1]
    state.draw_pile = rng.shuffle(state.discard_pile[:-1])
    state.discard_pile = [top_card]
    logger.debug(f"Reshuffled {len(state.draw_pile)} cards into the draw pile of {state.id}")
    return True


def draw_card_from_pile(state: GameState, rng: RNG) -> Optional[Card]:
    """
    Pop the top card of the draw pile, reshuffling the discard pile first when
    the draw pile is empty.

    Returns:
        The drawn card, or None if no card is left anywhere to draw
    """
    if not state.draw_pile and not reshuffle_discard_pile(state, rng):
        logger.warning(f"No cards left to draw in game {state.id}")
        return None
    return state.draw_pile.pop()
