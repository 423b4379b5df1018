"""
Move legality for card plays.

legal_moves() is the single source of truth for what the current player may
do. The engine re-checks every card play against it, the bots pick from it and
the registry compares client-submitted moves with it.
"""

from typing import Any, List, Mapping, Optional, Union

from .constants import ERROR_ILLEGAL_MOVE, ERROR_NOT_YOUR_TURN
from .errors import UnknownMoveError, WRONG_PHASE
from .models import (
    SUIT_COLORS, Card, CardColor, CardType, GamePhase, GameState, Move, MoveType
)


class ValidationResult:
    """Result of move validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message

    @classmethod
    def success(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        return cls(valid=False, error_code=error_code, error_message=error_message)


def is_card_playable(card: Card, top_card: Card, current_color: CardColor) -> bool:
    """
    Check if a card can be played on the discard pile.

    Wild cards always match. Otherwise the card must match the active color,
    or the top card's type (and value, for number cards).
    """
    if card.is_wild:
        return True

    if card.color == current_color:
        return True

    if card.type == top_card.type:
        if card.type != CardType.NUMBER:
            return True
        return card.value == top_card.value

    return False


def is_stackable(card: Card, top_card: Card) -> bool:
    """Whether card may be played onto a pending forced draw."""
    if card.type == CardType.WILD_DRAW_FOUR:
        return True
    return card.type == CardType.DRAW_TWO and top_card.type in (
        CardType.DRAW_TWO, CardType.WILD_DRAW_FOUR
    )


def has_stackable_card(state: GameState, player_id: str) -> bool:
    return any(is_stackable(card, state.top_card) for card in state.hand_of(player_id))


def _card_moves(card: Card) -> List[Move]:
    """Play moves for a card, one per color choice for wild types."""
    if card.is_wild:
        return [Move.play_card(card.id, color) for color in SUIT_COLORS]
    return [Move.play_card(card.id)]


def legal_moves(state: GameState, player_id: str) -> List[Move]:
    """
    Get all legal moves for a player.

    Args:
        state: Current game state
        player_id: Player asking

    Returns:
        List of legal moves; empty when the game is not being played or it is
        not this player's turn
    """
    if state.phase != GamePhase.PLAYING or state.current_player_id != player_id:
        return []

    hand = state.hand_of(player_id)
    moves: List[Move] = []

    # Pending +2/+4: stack if allowed, otherwise take the cards
    if state.draw_count > 0:
        if state.settings.stack_draw_cards:
            for card in hand:
                if is_stackable(card, state.top_card):
                    moves.extend(_card_moves(card))
        if not moves:
            moves.append(Move.draw_card())
        return moves

    # Just drew: play the drawn card if it fits, or pass
    if state.can_play_drawn_card and state.last_drawn_card is not None:
        drawn = state.last_drawn_card
        if is_card_playable(drawn, state.top_card, state.current_color):
            moves.extend(_card_moves(drawn))
        moves.append(Move.pass_turn())
        return moves

    for card in hand:
        if not is_card_playable(card, state.top_card, state.current_color):
            continue
        if card.type == CardType.WILD_DRAW_FOUR:
            # +4 only when nothing else in hand matches the active color
            holds_color = any(
                other.id != card.id and other.color == state.current_color
                for other in hand
            )
            if holds_color:
                continue
        moves.extend(_card_moves(card))

    if not moves:
        moves.append(Move.draw_card())

    # One call per one-card hand
    player = state.get_player(player_id)
    if len(hand) == 1 and state.settings.spell_call_required and not player.called_spell:
        moves.append(Move.call_uno())

    return moves


def is_legal_move(state: GameState, player_id: str, move: Move) -> bool:
    return move in legal_moves(state, player_id)


def validate_move(state: GameState, player_id: str, move: Move) -> ValidationResult:
    """
    Validate a move submitted by a (possibly stale or hostile) client.

    Args:
        state: Current game state
        player_id: Player submitting the move
        move: Parsed move

    Returns:
        ValidationResult with validation outcome
    """
    if state.phase != GamePhase.PLAYING:
        return ValidationResult.error(
            WRONG_PHASE,
            f"Game is not in play phase (current: {state.phase.value})"
        )

    if state.current_player_id != player_id:
        return ValidationResult.error(
            ERROR_NOT_YOUR_TURN,
            f"Not your turn (current: {state.current_player_id})"
        )

    if not is_legal_move(state, player_id, move):
        return ValidationResult.error(ERROR_ILLEGAL_MOVE, "Illegal move")

    return ValidationResult.success()


def parse_move(data: Union[Move, Mapping[str, Any]]) -> Move:
    """
    Parse a wire-format move.

    Accepts snake_case (card_id, chosen_color) and camelCase (cardId,
    chosenColor) keys.

    Raises:
        UnknownMoveError: If the payload is not a mapping, has no type or an
            unknown type, or carries an invalid card id or color
    """
    if isinstance(data, Move):
        return data
    if not isinstance(data, Mapping):
        raise UnknownMoveError(f"Malformed move: {data!r}")

    raw_type = data.get("type")
    try:
        move_type = MoveType(raw_type)
    except ValueError:
        raise UnknownMoveError(f"Unknown move type: {raw_type}")

    if move_type != MoveType.PLAY_CARD:
        return Move(move_type)

    card_id = data.get("card_id", data.get("cardId"))
    if not isinstance(card_id, str) or not card_id:
        raise UnknownMoveError("play_card requires a card id")

    raw_color = data.get("chosen_color", data.get("chosenColor"))
    chosen_color = None
    if raw_color is not None:
        try:
            chosen_color = CardColor(raw_color)
        except ValueError:
            raise UnknownMoveError(f"Unknown color: {raw_color}")

    return Move.play_card(card_id, chosen_color)
