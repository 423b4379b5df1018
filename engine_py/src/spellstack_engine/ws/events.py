"""
WebSocket event models and validation.

Every frame is a JSON object whose "t" field names the event.
"""

from enum import Enum
from typing import Any, Dict, List, Union

import orjson
from pydantic import AliasChoices, BaseModel, Field, ValidationError


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    START_GAME = "start_game"
    PROPOSE_MOVE = "propose_move"
    LEAVE_ROOM = "leave_room"
    PING = "ping"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    ROOM_CREATED = "room_created"
    JOINED = "joined"
    STATE = "state"
    SEATS_UPDATED = "seats_updated"
    ERROR = "error"
    PONG = "pong"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    t: EventType


class CreateRoomEvent(BaseEvent):
    t: EventType = EventType.CREATE_ROOM


class JoinRoomEvent(BaseEvent):
    """Join room event."""
    t: EventType = EventType.JOIN_ROOM
    room: str = Field(..., min_length=1, max_length=16)
    name: str = Field(..., max_length=30)
    is_bot: bool = Field(False, validation_alias=AliasChoices("is_bot", "isBot"))


class StartGameEvent(BaseEvent):
    """Start game event, host only."""
    t: EventType = EventType.START_GAME
    host_key: str = Field(..., min_length=1, validation_alias=AliasChoices("host_key", "hostKey"))


class ProposeMoveEvent(BaseEvent):
    """Propose a move for the sender's seat."""
    t: EventType = EventType.PROPOSE_MOVE
    move: Dict[str, Any]


class LeaveRoomEvent(BaseEvent):
    t: EventType = EventType.LEAVE_ROOM


class PingEvent(BaseEvent):
    t: EventType = EventType.PING


# Union type for all inbound events
InboundEvent = Union[
    CreateRoomEvent,
    JoinRoomEvent,
    StartGameEvent,
    ProposeMoveEvent,
    LeaveRoomEvent,
    PingEvent
]


# Outbound event models
class SeatInfo(BaseModel):
    player_id: str
    player_name: str
    connected: bool
    is_bot: bool = False


class RoomCreatedEvent(BaseModel):
    t: OutboundEventType = OutboundEventType.ROOM_CREATED
    room: str
    host_key: str


class JoinedEvent(BaseModel):
    """Join confirmation, sent only to the joining connection."""
    t: OutboundEventType = OutboundEventType.JOINED
    you: str
    seats: List[SeatInfo]


class StateEvent(BaseModel):
    """Redacted state for one viewer."""
    t: OutboundEventType = OutboundEventType.STATE
    state: Dict[str, Any]


class SeatsUpdatedEvent(BaseModel):
    t: OutboundEventType = OutboundEventType.SEATS_UPDATED
    seats: List[SeatInfo]


class ErrorEvent(BaseModel):
    """Error event."""
    t: OutboundEventType = OutboundEventType.ERROR
    code: str
    msg: str


class PongEvent(BaseModel):
    t: OutboundEventType = OutboundEventType.PONG


# Union type for all outbound events
OutboundEvent = Union[
    RoomCreatedEvent,
    JoinedEvent,
    StateEvent,
    SeatsUpdatedEvent,
    ErrorEvent,
    PongEvent
]


EVENT_MAP = {
    EventType.CREATE_ROOM: CreateRoomEvent,
    EventType.JOIN_ROOM: JoinRoomEvent,
    EventType.START_GAME: StartGameEvent,
    EventType.PROPOSE_MOVE: ProposeMoveEvent,
    EventType.LEAVE_ROOM: LeaveRoomEvent,
    EventType.PING: PingEvent,
}


def parse_inbound_event(data: Any) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("t")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    try:
        return EVENT_MAP[event_type].model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e}")


def encode_event(event: BaseModel) -> str:
    """Encode an outbound event as a JSON text frame."""
    return orjson.dumps(event.model_dump(mode="json")).decode()


def create_error_event(code: str, message: str) -> ErrorEvent:
    return ErrorEvent(code=code, msg=message)


def create_joined_event(player_id: str, seats: List[Dict[str, Any]]) -> JoinedEvent:
    return JoinedEvent(you=player_id, seats=[SeatInfo(**seat) for seat in seats])


def create_seats_updated_event(seats: List[Dict[str, Any]]) -> SeatsUpdatedEvent:
    return SeatsUpdatedEvent(seats=[SeatInfo(**seat) for seat in seats])


def create_state_event(state: Dict[str, Any]) -> StateEvent:
    return StateEvent(state=state)
