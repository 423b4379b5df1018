"""Game models and data structures"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .rules import RuleConfig


class CardColor(str, Enum):
    RED = 'red'
    GREEN = 'green'
    BLUE = 'blue'
    YELLOW = 'yellow'
    WILD = 'wild'


class CardType(str, Enum):
    NUMBER = 'number'
    SKIP = 'skip'
    REVERSE = 'reverse'
    DRAW_TWO = 'draw_two'
    WILD = 'wild'
    WILD_DRAW_FOUR = 'wild_draw_four'


class Direction(str, Enum):
    CLOCKWISE = 'clockwise'
    COUNTER_CLOCKWISE = 'counter_clockwise'


class GamePhase(str, Enum):
    PLAYING = 'playing'
    ROUND_END = 'round_end'
    GAME_END = 'game_end'


class MoveType(str, Enum):
    PLAY_CARD = 'play_card'
    DRAW_CARD = 'draw_card'
    PASS_TURN = 'pass_turn'
    CALL_UNO = 'call_uno'


class AIDifficulty(str, Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'


# Concrete colors a wild card may name, in the order moves are generated
SUIT_COLORS = [CardColor.RED, CardColor.GREEN, CardColor.BLUE, CardColor.YELLOW]


@dataclass(frozen=True)
class Card:
    id: str
    color: CardColor
    type: CardType
    value: Optional[int] = None  # 0-9, number cards only

    @property
    def is_wild(self) -> bool:
        return self.type in (CardType.WILD, CardType.WILD_DRAW_FOUR)

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "color": self.color.value, "type": self.type.value}
        if self.value is not None:
            data["value"] = self.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Card':
        return cls(
            id=data["id"],
            color=CardColor(data["color"]),
            type=CardType(data["type"]),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class Move:
    """A move submitted for the current player."""
    type: MoveType
    card_id: Optional[str] = None
    chosen_color: Optional[CardColor] = None

    @classmethod
    def play_card(cls, card_id: str, chosen_color: Optional[CardColor] = None) -> 'Move':
        return cls(MoveType.PLAY_CARD, card_id=card_id, chosen_color=chosen_color)

    @classmethod
    def draw_card(cls) -> 'Move':
        return cls(MoveType.DRAW_CARD)

    @classmethod
    def pass_turn(cls) -> 'Move':
        return cls(MoveType.PASS_TURN)

    @classmethod
    def call_uno(cls) -> 'Move':
        return cls(MoveType.CALL_UNO)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.type == MoveType.PLAY_CARD:
            data["card_id"] = self.card_id
            if self.chosen_color is not None:
                data["chosen_color"] = self.chosen_color.value
        return data


@dataclass
class Player:
    id: str
    name: str
    is_bot: bool = False
    hand_size: int = 0  # public counter, mirrors len(player_hands[id])
    called_spell: bool = False


@dataclass
class GameState:
    id: str
    seed: str
    players: List[Player]
    current_player_id: str
    top_card: Card
    current_color: CardColor
    phase: GamePhase = GamePhase.PLAYING
    direction: Direction = Direction.CLOCKWISE
    draw_pile: List[Card] = field(default_factory=list)  # top = last element
    discard_pile: List[Card] = field(default_factory=list)  # top = last element
    player_hands: Dict[str, List[Card]] = field(default_factory=dict)  # private
    draw_count: int = 0  # pending forced draws from stacked +2/+4
    can_play_drawn_card: bool = False
    last_drawn_card: Optional[Card] = None
    settings: RuleConfig = field(default_factory=RuleConfig)

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        raise KeyError(player_id)

    @property
    def current_player(self) -> Player:
        return self.players[self.player_index(self.current_player_id)]

    def hand_of(self, player_id: str) -> List[Card]:
        return self.player_hands.get(player_id, [])


@dataclass
class GameResult:
    winner: Optional[str]
    scores: Dict[str, int]
    is_terminal: bool
