"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Card, GamePhase, GameState, Move
from ..validate import legal_moves


class BaseBot(ABC):
    """Abstract base class for bot players."""

    def __init__(self, player_id: str):
        self.player_id = player_id

    @abstractmethod
    def choose_action(self, state: GameState) -> Optional[Move]:
        """
        Choose a move based on the current game state.

        Args:
            state: Current game state

        Returns:
            Move to submit, or None if it is not this bot's turn
        """
        pass

    def get_player_hand(self, state: GameState) -> List[Card]:
        """Get this bot's current hand."""
        return state.hand_of(self.player_id)

    def is_my_turn(self, state: GameState) -> bool:
        return state.phase == GamePhase.PLAYING and state.current_player_id == self.player_id

    def get_legal_moves(self, state: GameState) -> List[Move]:
        return legal_moves(state, self.player_id)

    def get_other_players(self, state: GameState) -> List[str]:
        """Get list of other player IDs."""
        return [player.id for player in state.players if player.id != self.player_id]

    def count_cards_in_hand(self, state: GameState, player_id: str) -> int:
        """Public hand size of another player."""
        player = state.get_player(player_id)
        return player.hand_size if player else 0
