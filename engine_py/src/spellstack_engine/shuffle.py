"""
Seeded randomness, deck construction, dealing and card scoring.
"""

import math
import random
from collections import Counter
from typing import Dict, List, Sequence, Tuple, TypeVar

from .constants import (
    ACTION_CARD_POINTS, ACTION_TYPES, CARDS_PER_HAND, NUMBER_VALUES,
    WILD_CARD_POINTS, WILD_COPIES, WILD_TYPES
)
from .errors import EmptyInputError, InsufficientCardsError
from .models import SUIT_COLORS, Card, CardColor, CardType, GameState

T = TypeVar('T')


class RNG:
    """
    Deterministic random source.

    Two instances built from the same seed string produce the same sequence
    of outputs. This is the only source of randomness used by the engine and
    the bots.
    """

    def __init__(self, seed: str):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._random.random()

    def random_int(self, low: int, high: int) -> int:
        """Uniform integer in the inclusive range [low, high]."""
        return math.floor(self.random() * (high - low + 1)) + low

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """
        Return a shuffled copy of items (Fisher-Yates from the end).

        The input sequence is never modified.
        """
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.random_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def choice(self, items: Sequence[T]) -> T:
        """Pick a uniformly random element."""
        if len(items) == 0:
            raise EmptyInputError("Cannot pick from an empty sequence")
        return items[self.random_int(0, len(items) - 1)]


def create_deck() -> List[Card]:
    """
    Create the 108-card deck in catalogue order (not shuffled).

    Per suit color: one 0, two each of 1-9, two each of skip, reverse and
    draw-two. Then four wild and four wild-draw-four cards.
    """
    deck = []
    card_id = 0

    def next_id() -> str:
        nonlocal card_id
        value = f"card-{card_id}"
        card_id += 1
        return value

    for color in SUIT_COLORS:
        for value in NUMBER_VALUES:
            copies = 1 if value == 0 else 2
            for _ in range(copies):
                deck.append(Card(next_id(), color, CardType.NUMBER, value))

        for card_type in ACTION_TYPES:
            for _ in range(2):
                deck.append(Card(next_id(), color, card_type))

    for card_type in WILD_TYPES:
        for _ in range(WILD_COPIES):
            deck.append(Card(next_id(), CardColor.WILD, card_type))

    return deck


def deal_cards(
    deck: List[Card],
    player_ids: List[str],
    per_player: int = CARDS_PER_HAND
) -> Tuple[Dict[str, List[Card]], List[Card]]:
    """
    Deal cards to players by popping from the end of the deck.

    Args:
        deck: Deck to deal from (not modified)
        player_ids: Players to deal to, in seat order
        per_player: Number of cards each player receives

    Returns:
        Tuple of (player_id -> dealt cards, remaining deck)

    Raises:
        InsufficientCardsError: If the deck runs out before dealing completes
    """
    remaining = list(deck)
    hands: Dict[str, List[Card]] = {player_id: [] for player_id in player_ids}

    for _ in range(per_player):
        for player_id in player_ids:
            if not remaining:
                raise InsufficientCardsError(
                    f"Not enough cards to deal {per_player} to {len(player_ids)} players"
                )
            hands[player_id].append(remaining.pop())

    return hands, remaining


def get_card_points(card: Card) -> int:
    """Point value of a card left in hand at round end."""
    if card.type == CardType.NUMBER:
        return card.value or 0
    if card.type in ACTION_TYPES:
        return ACTION_CARD_POINTS
    if card.type in WILD_TYPES:
        return WILD_CARD_POINTS
    return 0


def calculate_hand_score(hand: List[Card]) -> int:
    return sum(get_card_points(card) for card in hand)


def validate_deck_integrity(state: GameState) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Args:
        state: Game state to validate

    Returns:
        True if the draw pile, discard pile and hands hold exactly the full
        deck and every public hand size matches its private hand
    """
    all_cards = list(state.draw_pile) + list(state.discard_pile)
    for hand in state.player_hands.values():
        all_cards.extend(hand)

    if Counter(all_cards) != Counter(create_deck()):
        return False

    return all(
        player.hand_size == len(state.hand_of(player.id))
        for player in state.players
    )
