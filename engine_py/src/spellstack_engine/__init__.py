"""
SpellStack game engine: deterministic rules for a shedding card game.
"""

from .engine import (
    apply_automatic_draw_cards, apply_move, create_game, is_terminal, score
)
from .errors import GameError
from .models import Card, GameResult, GameState, Move, Player
from .rules import RuleConfig
from .serialization import redacted_view
from .shuffle import RNG, create_deck, deal_cards
from .validate import legal_moves

__version__ = "1.0.0"

__all__ = [
    "RNG",
    "Card",
    "GameError",
    "GameResult",
    "GameState",
    "Move",
    "Player",
    "RuleConfig",
    "apply_automatic_draw_cards",
    "apply_move",
    "create_deck",
    "create_game",
    "deal_cards",
    "is_terminal",
    "legal_moves",
    "redacted_view",
    "score",
]
