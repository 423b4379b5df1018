"""
Computer players.
"""

from .base import BaseBot
from .heuristic import HeuristicBot, choose_ai_move

__all__ = ["BaseBot", "HeuristicBot", "choose_ai_move"]
