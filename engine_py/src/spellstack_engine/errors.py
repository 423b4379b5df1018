# engine_py/src/spellstack_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    code = "GAME_ERROR"

    def __init__(self, message: str, code: str = None):
        self.code = code or self.code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


# Specific error codes
INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
NO_VALID_START_CARD = "NO_VALID_START_CARD"
INSUFFICIENT_CARDS = "INSUFFICIENT_CARDS"
EMPTY_INPUT = "EMPTY_INPUT"
WRONG_PHASE = "WRONG_PHASE"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
ILLEGAL_MOVE = "ILLEGAL_MOVE"
UNKNOWN_MOVE = "UNKNOWN_MOVE"


class InvalidPlayerCountError(GameError):
    code = INVALID_PLAYER_COUNT


class NoValidStartCardError(GameError):
    code = NO_VALID_START_CARD


class InsufficientCardsError(GameError):
    code = INSUFFICIENT_CARDS


class EmptyInputError(GameError):
    code = EMPTY_INPUT


class WrongPhaseError(GameError):
    code = WRONG_PHASE


class CardNotInHandError(GameError):
    code = CARD_NOT_IN_HAND


class IllegalMoveError(GameError):
    code = ILLEGAL_MOVE


class UnknownMoveError(GameError):
    code = UNKNOWN_MOVE
