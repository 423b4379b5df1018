"""Game constants"""

from .models import CardType

# Deck composition
CARDS_PER_HAND = 7
DECK_SIZE = 108
NUMBER_VALUES = range(10)
ACTION_TYPES = [CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO]
WILD_TYPES = [CardType.WILD, CardType.WILD_DRAW_FOUR]
WILD_COPIES = 4

# Scoring
ACTION_CARD_POINTS = 20
WILD_CARD_POINTS = 50

# Forced draw amounts
DRAW_TWO_AMOUNT = 2
WILD_DRAW_FOUR_AMOUNT = 4

# Cards the AI treats as disrupting the next player
DISRUPTIVE_TYPES = [CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO, CardType.WILD_DRAW_FOUR]

# Player limits
MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Snapshot format
SERIALIZATION_VERSION = "1.0.0"

# Rooms
ROOM_CODE_LENGTH = 5
HOST_KEY_LENGTH = 16
DEFAULT_ROOM_IDLE_MINUTES = 10

# Relay error codes
ERROR_ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ERROR_ROOM_FULL = "ROOM_FULL"
ERROR_INVALID_HOST_KEY = "INVALID_HOST_KEY"
ERROR_GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
ERROR_INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"
ERROR_NOT_YOUR_TURN = "NOT_YOUR_TURN"
ERROR_ILLEGAL_MOVE = "ILLEGAL_MOVE"
ERROR_INVALID_NAME = "INVALID_NAME"
ERROR_INVALID_EVENT = "INVALID_EVENT"
ERROR_INTERNAL = "INTERNAL_ERROR"
