"""
Game registry: the only owner of rooms and their game states.

Each room gets its own lock when it is created and every engine call for a
room goes through the registry while holding it, so moves for one room are
applied strictly one at a time while different rooms proceed independently.
"""

import logging
import secrets
import string
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .constants import (
    DEFAULT_ROOM_IDLE_MINUTES, ERROR_GAME_ALREADY_STARTED,
    ERROR_INSUFFICIENT_PLAYERS, ERROR_INVALID_HOST_KEY, ERROR_INVALID_NAME,
    ERROR_ROOM_FULL, ERROR_ROOM_NOT_FOUND, HOST_KEY_LENGTH, MAX_PLAYERS,
    MIN_PLAYERS, ROOM_CODE_LENGTH
)
from .engine import apply_automatic_draw_cards, apply_move, create_game, is_terminal
from .errors import GameError, WRONG_PHASE
from .models import GameState, Move
from .rules import RuleConfig
from .serialization import redacted_view
from .shuffle import validate_deck_integrity
from .validate import parse_move, validate_move

logger = logging.getLogger(__name__)


@dataclass
class Seat:
    player_id: str
    name: str
    connected: bool = True
    is_bot: bool = False


@dataclass
class Room:
    id: str
    host_key: str
    seats: Dict[str, Seat] = field(default_factory=dict)  # join order
    state: Optional[GameState] = None
    host_player_id: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    last_seen: float = field(default_factory=time.time)

    def touch(self) -> None:
        self.last_seen = time.time()

    def is_empty(self) -> bool:
        return not any(seat.connected and not seat.is_bot for seat in self.seats.values())

    def seat_list(self) -> List[Dict[str, Any]]:
        return [
            {
                "player_id": seat.player_id,
                "player_name": seat.name,
                "connected": seat.connected,
                "is_bot": seat.is_bot,
            }
            for seat in self.seats.values()
        ]


class ActionResult:
    """Outcome of a registry operation."""

    def __init__(
        self,
        success: bool,
        room: Optional[Room] = None,
        state: Optional[GameState] = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None
    ):
        self.success = success
        self.room = room
        self.state = state
        self.error_code = error_code
        self.error_message = error_message
        self.data = data or {}

    @classmethod
    def ok(cls, room: Room, **data) -> 'ActionResult':
        return cls(success=True, room=room, state=room.state, data=data)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ActionResult':
        return cls(success=False, error_code=error_code, error_message=error_message)


def _random_code(length: int, alphabet: str) -> str:
    return ''.join(secrets.choice(alphabet) for _ in range(length))


class GameRegistry:
    """Owns every room; all access to a room's game goes through here."""

    def __init__(self, rules: Optional[RuleConfig] = None):
        self.rooms: Dict[str, Room] = {}
        self.room_locks: Dict[str, threading.Lock] = {}
        self.rules = rules or RuleConfig()
        self._registry_lock = threading.Lock()

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def _room_lock(self, room_id: str) -> Optional[threading.Lock]:
        """Lock of an existing room; unknown codes never get one."""
        with self._registry_lock:
            return self.room_locks.get(room_id)

    def create_room(self) -> ActionResult:
        with self._registry_lock:
            room_id = _random_code(ROOM_CODE_LENGTH, string.ascii_uppercase + string.digits)
            while room_id in self.rooms:
                room_id = _random_code(ROOM_CODE_LENGTH, string.ascii_uppercase + string.digits)
            host_key = _random_code(HOST_KEY_LENGTH, string.ascii_letters + string.digits)
            room = Room(id=room_id, host_key=host_key)
            self.rooms[room_id] = room
            self.room_locks[room_id] = threading.Lock()

        logger.info(f"Created room {room_id}")
        return ActionResult.ok(room, room_id=room_id, host_key=host_key)

    def join_room(self, room_id: str, name: str, is_bot: bool = False) -> ActionResult:
        name = (name or "").strip()
        if not name:
            return ActionResult.error(ERROR_INVALID_NAME, "Name is required")

        lock = self._room_lock(room_id)
        if lock is None:
            return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

        with lock:
            room = self.get_room(room_id)
            if not room:
                return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

            # A disconnected seat with the same name is taken back
            for seat in room.seats.values():
                if seat.name == name and not seat.connected and not seat.is_bot:
                    seat.connected = True
                    room.touch()
                    logger.info(f"Player {name} reconnected to room {room_id} as {seat.player_id}")
                    return ActionResult.ok(room, player_id=seat.player_id, reconnected=True)

            if room.state is not None:
                return ActionResult.error(ERROR_GAME_ALREADY_STARTED, "Game already started")

            if len(room.seats) >= min(MAX_PLAYERS, self.rules.max_players):
                return ActionResult.error(ERROR_ROOM_FULL, "Room is full")

            player_id = f"player_{len(room.seats) + 1}"
            room.seats[player_id] = Seat(player_id=player_id, name=name, is_bot=is_bot)
            if room.host_player_id is None and not is_bot:
                room.host_player_id = player_id
            room.touch()

        logger.info(f"Player {name} joined room {room_id} as {player_id}")
        return ActionResult.ok(room, player_id=player_id, reconnected=False)

    def start_game(self, room_id: str, host_key: str, seed: Optional[str] = None) -> ActionResult:
        """
        Deal a new round for the seated players.

        The seed is generated here unless a caller inside the process passes
        one; clients never choose it, as it fixes every hidden card.
        """
        lock = self._room_lock(room_id)
        if lock is None:
            return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

        with lock:
            room = self.get_room(room_id)
            if not room:
                return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")
            if not secrets.compare_digest(room.host_key, host_key or ""):
                return ActionResult.error(ERROR_INVALID_HOST_KEY, "Invalid host key")
            if room.state is not None:
                return ActionResult.error(ERROR_GAME_ALREADY_STARTED, "Game already started")
            if len(room.seats) < MIN_PLAYERS:
                return ActionResult.error(
                    ERROR_INSUFFICIENT_PLAYERS,
                    f"Need at least {MIN_PLAYERS} players to start"
                )

            players = [
                {"id": seat.player_id, "name": seat.name, "is_bot": seat.is_bot}
                for seat in room.seats.values()
            ]
            game_seed = seed if seed is not None else secrets.token_hex(16)
            try:
                room.state = create_game(players, game_seed, self.rules)
            except GameError as e:
                return ActionResult.error(e.code, e.message)
            room.touch()

        logger.info(f"Game started in room {room_id} with {len(players)} players")
        return ActionResult.ok(room)

    def propose_move(
        self,
        room_id: str,
        player_id: str,
        move: Union[Move, Mapping[str, Any]]
    ) -> ActionResult:
        """
        Validate and apply a client-submitted move, then resolve any forced
        draw that leaves the next player no choice.
        """
        lock = self._room_lock(room_id)
        if lock is None:
            return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

        with lock:
            room = self.get_room(room_id)
            if not room or player_id not in room.seats:
                return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Not in a room")
            if room.state is None:
                return ActionResult.error(WRONG_PHASE, "Game not started")

            try:
                parsed = parse_move(move)
            except GameError as e:
                return ActionResult.error(e.code, e.message)

            validation = validate_move(room.state, player_id, parsed)
            if not validation.valid:
                logger.info(f"Rejected move from {player_id} in room {room_id}: {validation.error_message}")
                return ActionResult.error(validation.error_code, validation.error_message)

            try:
                new_state = apply_move(room.state, parsed)
                if new_state.draw_count > 0:
                    new_state = apply_automatic_draw_cards(new_state)
            except GameError as e:
                logger.info(f"Engine rejected move from {player_id} in room {room_id}: {e}")
                return ActionResult.error(e.code, e.message)

            if not validate_deck_integrity(new_state):
                logger.error(f"Card conservation check failed in room {room_id}")

            room.state = new_state
            room.touch()

        if is_terminal(new_state):
            logger.info(f"Round finished in room {room_id}")
        return ActionResult.ok(room)

    def leave_room(self, room_id: str, player_id: str) -> ActionResult:
        lock = self._room_lock(room_id)
        if lock is None:
            return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

        with lock:
            room = self.get_room(room_id)
            if not room or player_id not in room.seats:
                return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Not in a room")
            room.seats[player_id].connected = False
            room.touch()

        logger.info(f"Player {player_id} left room {room_id}")
        return ActionResult.ok(room)

    def reset_room(self, room_id: str) -> ActionResult:
        """Return a room to the lobby once its round is over."""
        lock = self._room_lock(room_id)
        if lock is None:
            return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")

        with lock:
            room = self.get_room(room_id)
            if not room:
                return ActionResult.error(ERROR_ROOM_NOT_FOUND, "Room not found")
            room.state = None
            room.touch()
        return ActionResult.ok(room)

    def view_for(self, room_id: str, viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
        room = self.get_room(room_id)
        if not room or room.state is None:
            return None
        return redacted_view(room.state, viewer_id)

    def expire_idle_rooms(self, idle_minutes: int = DEFAULT_ROOM_IDLE_MINUTES) -> List[str]:
        """Drop rooms with no connected humans that have been idle too long."""
        cutoff = time.time() - idle_minutes * 60
        expired = []
        with self._registry_lock:
            for room_id, room in list(self.rooms.items()):
                if room.is_empty() and room.last_seen < cutoff:
                    del self.rooms[room_id]
                    self.room_locks.pop(room_id, None)
                    expired.append(room_id)

        for room_id in expired:
            logger.info(f"Cleaning up expired room: {room_id}")
        return expired
