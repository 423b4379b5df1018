"""
FastAPI WebSocket server for SpellStack rooms.

The server holds no game logic: every message is turned into a GameRegistry
call and each connected seat then gets its own redacted view of the result.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Dict, Optional, Set, Tuple

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..bots.heuristic import HeuristicBot
from ..constants import DEFAULT_ROOM_IDLE_MINUTES, ERROR_INTERNAL, ERROR_INVALID_EVENT, ERROR_ROOM_NOT_FOUND
from ..engine import is_terminal
from ..models import AIDifficulty
from ..registry import ActionResult, GameRegistry
from .events import (
    CreateRoomEvent, JoinRoomEvent, LeaveRoomEvent, PingEvent, PongEvent,
    ProposeMoveEvent, RoomCreatedEvent, StartGameEvent, create_error_event,
    create_joined_event, create_seats_updated_event, create_state_event,
    encode_event, parse_inbound_event
)

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "info").upper())
logger = logging.getLogger(__name__)

ROOM_IDLE_MINUTES = int(os.getenv("ROOM_IDLE_MINUTES", DEFAULT_ROOM_IDLE_MINUTES))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
BOT_DELAY_SECONDS = float(os.getenv("BOT_DELAY_SECONDS", "0.8"))
BOT_DIFFICULTY = AIDifficulty(os.getenv("BOT_DIFFICULTY", "medium").lower())
RESET_DELAY_SECONDS = 3.0
CLEANUP_INTERVAL_SECONDS = 60

registry = GameRegistry()
bots: Dict[Tuple[str, str], HeuristicBot] = {}  # (room_id, player_id) -> bot
background_tasks: Set[asyncio.Task] = set()


def _forget_task(task: asyncio.Task):
    background_tasks.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Background task failed: {task.exception()!r}")


def spawn(coro) -> asyncio.Task:
    """Run a coroutine in the background, holding a reference until it ends."""
    task = asyncio.create_task(coro)
    background_tasks.add(task)
    task.add_done_callback(_forget_task)
    return task


async def cleanup_rooms_periodically():
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        for room_id in registry.expire_idle_rooms(ROOM_IDLE_MINUTES):
            for key in [key for key in bots if key[0] == room_id]:
                del bots[key]


@asynccontextmanager
async def lifespan(app: FastAPI):
    cleanup_task = asyncio.create_task(cleanup_rooms_periodically())
    logger.info(f"Room idle timeout: {ROOM_IDLE_MINUTES} minutes")
    try:
        yield
    finally:
        cleanup_task.cancel()


# FastAPI app
app = FastAPI(title="SpellStack Game Server", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ClientSession:
    """The room and seat a single connection is bound to."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.room_id: Optional[str] = None
        self.player_id: Optional[str] = None

    def bind(self, room_id: str, player_id: str):
        self.room_id = room_id
        self.player_id = player_id

    def clear(self):
        self.room_id = None
        self.player_id = None


class ConnectionManager:
    """Manages WebSocket connections and per-seat broadcasting."""

    def __init__(self):
        self.room_connections: Dict[str, Dict[str, WebSocket]] = {}

    def connect(self, websocket: WebSocket, room_id: str, player_id: str):
        self.room_connections.setdefault(room_id, {})[player_id] = websocket
        logger.info(f"Player {player_id} connected to room {room_id}")

    def disconnect(self, room_id: Optional[str], player_id: Optional[str]):
        if not room_id or not player_id:
            return
        connections = self.room_connections.get(room_id, {})
        connections.pop(player_id, None)
        if not connections:
            self.room_connections.pop(room_id, None)

    def connection_count(self) -> int:
        return sum(len(conns) for conns in self.room_connections.values())

    async def send(self, websocket: WebSocket, event: BaseModel):
        await websocket.send_text(encode_event(event))

    async def broadcast_to_room(self, room_id: str, event: BaseModel):
        """Send the same event to every connection in a room."""
        for player_id, websocket in list(self.room_connections.get(room_id, {}).items()):
            try:
                await self.send(websocket, event)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.error(f"Error broadcasting to {player_id}: {e}")
                self.disconnect(room_id, player_id)

    async def broadcast_seats(self, room_id: str):
        room = registry.get_room(room_id)
        if room:
            await self.broadcast_to_room(room_id, create_seats_updated_event(room.seat_list()))

    async def broadcast_state(self, room_id: str):
        """Send each connected seat its own view of the room's game."""
        for player_id, websocket in list(self.room_connections.get(room_id, {}).items()):
            view = registry.view_for(room_id, player_id)
            if view is None:
                continue
            try:
                await self.send(websocket, create_state_event(view))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.error(f"Error sending state to {player_id}: {e}")
                self.disconnect(room_id, player_id)


manager = ConnectionManager()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "rooms": len(registry.rooms),
        "connections": manager.connection_count(),
    }


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Main WebSocket endpoint."""
    await websocket.accept()
    session = ClientSession(websocket)
    logger.info("WebSocket connection accepted")

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                event = parse_inbound_event(orjson.loads(raw_data))
            except ValueError as e:
                await manager.send(websocket, create_error_event(ERROR_INVALID_EVENT, str(e)))
                continue

            try:
                await handle_event(session, event)
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception(f"Error handling {event.t.value} event")
                await manager.send(websocket, create_error_event(ERROR_INTERNAL, "Internal server error"))

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        room_id, player_id = session.room_id, session.player_id
        manager.disconnect(room_id, player_id)
        if room_id and player_id:
            result = registry.leave_room(room_id, player_id)
            if result.success:
                await manager.broadcast_seats(room_id)


async def handle_event(session: ClientSession, event) -> None:
    """Handle an inbound event."""
    if isinstance(event, CreateRoomEvent):
        await handle_create_room(session)
    elif isinstance(event, JoinRoomEvent):
        await handle_join_room(session, event)
    elif isinstance(event, StartGameEvent):
        await handle_start_game(session, event)
    elif isinstance(event, ProposeMoveEvent):
        await handle_propose_move(session, event)
    elif isinstance(event, LeaveRoomEvent):
        await handle_leave_room(session)
    elif isinstance(event, PingEvent):
        await manager.send(session.websocket, PongEvent())
    else:
        raise ValueError(f"Unhandled event type: {type(event)}")


async def send_error(session: ClientSession, result: ActionResult):
    await manager.send(
        session.websocket,
        create_error_event(result.error_code, result.error_message)
    )


async def send_not_in_room(session: ClientSession):
    await manager.send(
        session.websocket,
        create_error_event(ERROR_ROOM_NOT_FOUND, "Not in a room")
    )


async def handle_create_room(session: ClientSession):
    result = registry.create_room()
    await manager.send(
        session.websocket,
        RoomCreatedEvent(room=result.data["room_id"], host_key=result.data["host_key"])
    )


async def handle_join_room(session: ClientSession, event: JoinRoomEvent):
    """Seat the sender, or add a bot seat on the sender's behalf."""
    room_id = event.room.strip().upper()
    result = registry.join_room(room_id, event.name, event.is_bot)
    if not result.success:
        await send_error(session, result)
        return

    player_id = result.data["player_id"]
    if event.is_bot:
        bots[(room_id, player_id)] = HeuristicBot(player_id, BOT_DIFFICULTY)
        await manager.broadcast_seats(room_id)
        return

    session.bind(room_id, player_id)
    manager.connect(session.websocket, room_id, player_id)
    await manager.send(session.websocket, create_joined_event(player_id, result.room.seat_list()))
    await manager.broadcast_seats(room_id)

    # A reconnecting player picks the game up where it is
    view = registry.view_for(room_id, player_id)
    if view is not None:
        await manager.send(session.websocket, create_state_event(view))


async def handle_start_game(session: ClientSession, event: StartGameEvent):
    if not session.room_id:
        await send_not_in_room(session)
        return

    result = registry.start_game(session.room_id, event.host_key)
    if not result.success:
        await send_error(session, result)
        return

    logger.info(f"Game started for room {session.room_id}, first player {result.state.current_player_id}")
    await after_state_change(session.room_id)


async def handle_propose_move(session: ClientSession, event: ProposeMoveEvent):
    if not session.room_id or not session.player_id:
        await send_not_in_room(session)
        return

    result = registry.propose_move(session.room_id, session.player_id, event.move)
    if not result.success:
        await send_error(session, result)
        return

    await after_state_change(session.room_id)


async def handle_leave_room(session: ClientSession):
    room_id, player_id = session.room_id, session.player_id
    if not room_id or not player_id:
        return

    registry.leave_room(room_id, player_id)
    manager.disconnect(room_id, player_id)
    session.clear()
    await manager.broadcast_seats(room_id)


async def after_state_change(room_id: str):
    """Broadcast the new state, then move bots or wind the round down."""
    await manager.broadcast_state(room_id)

    room = registry.get_room(room_id)
    if not room or room.state is None:
        return

    if is_terminal(room.state):
        spawn(reset_room_later(room_id))
        return

    bot = bots.get((room_id, room.state.current_player_id))
    if bot is not None:
        spawn(execute_bot_action(room_id, bot))


async def reset_room_later(room_id: str):
    """Return a finished room to the lobby once players have seen the result."""
    await asyncio.sleep(RESET_DELAY_SECONDS)
    result = registry.reset_room(room_id)
    if result.success:
        logger.info(f"Resetting room {room_id} to lobby after game end")
        await manager.broadcast_seats(room_id)


async def execute_bot_action(room_id: str, bot: HeuristicBot):
    """Execute a bot action after a delay."""
    await asyncio.sleep(BOT_DELAY_SECONDS)

    room = registry.get_room(room_id)
    if not room or room.state is None:
        logger.warning(f"Room {room_id} no longer has a game")
        return

    move = bot.choose_action(room.state)
    if move is None:
        return

    result = registry.propose_move(room_id, bot.player_id, move)
    if not result.success:
        logger.error(f"Bot {bot.player_id} move rejected in room {room_id}: {result.error_message}")
        return

    logger.debug(f"Bot {bot.player_id} played {move.type.value} in room {room_id}")
    await after_state_change(room_id)
