"""
WebSocket relay tests through FastAPI's TestClient.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from spellstack_engine.engine import create_game
from spellstack_engine.ws.events import (
    JoinRoomEvent, ProposeMoveEvent, StartGameEvent, encode_event,
    create_error_event, parse_inbound_event
)
from spellstack_engine.ws.server import app, background_tasks, spawn


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_ping_and_invalid_frames(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"t": "ping"})
        assert ws.receive_json() == {"t": "pong"}

        ws.send_text("not json")
        error = ws.receive_json()
        assert error["t"] == "error"
        assert error["code"] == "INVALID_EVENT"

        ws.send_json({"t": "propose_move"})
        assert ws.receive_json()["code"] == "INVALID_EVENT"


def test_room_lifecycle(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"t": "create_room"})
        created = ws.receive_json()
        assert created["t"] == "room_created"
        room, host_key = created["room"], created["host_key"]

        ws.send_json({"t": "start_game", "host_key": host_key})
        assert ws.receive_json()["code"] == "ROOM_NOT_FOUND"

        ws.send_json({"t": "join_room", "room": room, "name": "Alice"})
        joined = ws.receive_json()
        assert joined["t"] == "joined"
        assert joined["you"] == "player_1"
        assert ws.receive_json()["t"] == "seats_updated"

        ws.send_json({"t": "start_game", "hostKey": host_key})
        assert ws.receive_json()["code"] == "INSUFFICIENT_PLAYERS"

        ws.send_json({"t": "join_room", "room": room, "name": "Robo", "is_bot": True})
        seats = ws.receive_json()
        assert seats["t"] == "seats_updated"
        assert [s["is_bot"] for s in seats["seats"]] == [False, True]

        ws.send_json({"t": "start_game", "host_key": host_key})
        message = ws.receive_json()
        assert message["t"] == "state"
        state = message["state"]
        assert state["current_player_id"] == "player_1"
        assert len(state["your_hand"]) == 7
        assert state["player_hands"]["player_2"] == {"count": 7}
        assert state["draw_pile_count"] == 93

        ws.send_json({"t": "propose_move", "move": {"type": "pass_turn"}})
        assert ws.receive_json()["code"] == "ILLEGAL_MOVE"


def test_client_cannot_choose_seed(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"t": "create_room"})
        created = ws.receive_json()
        room, host_key = created["room"], created["host_key"]

        ws.send_json({"t": "join_room", "room": room, "name": "Alice"})
        ws.receive_json()
        ws.receive_json()
        ws.send_json({"t": "join_room", "room": room, "name": "Robo", "is_bot": True})
        ws.receive_json()

        ws.send_json({"t": "start_game", "host_key": host_key, "seed": "chosen"})
        message = ws.receive_json()
        assert message["t"] == "state"
        assert "seed" not in message["state"]

    players = [
        {"id": "player_1", "name": "Alice", "is_bot": False},
        {"id": "player_2", "name": "Robo", "is_bot": True},
    ]
    predicted = create_game(players, "chosen").hand_of("player_1")
    assert message["state"]["your_hand"] != [card.to_dict() for card in predicted]


def test_join_unknown_room(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"t": "join_room", "room": "ZZZZZ", "name": "Alice"})
        error = ws.receive_json()
        assert error == {"t": "error", "code": "ROOM_NOT_FOUND", "msg": "Room not found"}


@pytest.mark.asyncio
async def test_event_parsing():
    start = parse_inbound_event({"t": "start_game", "hostKey": "abc"})
    assert isinstance(start, StartGameEvent)
    assert start.host_key == "abc"
    assert not hasattr(start, "seed")

    move = parse_inbound_event({"t": "propose_move", "move": {"type": "draw_card"}})
    assert isinstance(move, ProposeMoveEvent)

    bot = parse_inbound_event({"t": "join_room", "room": "ABCDE", "name": "R", "isBot": True})
    assert isinstance(bot, JoinRoomEvent)
    assert bot.is_bot

    for bad in ({}, {"t": "join_room"}, ["ping"], {"t": "start_game"}):
        with pytest.raises(ValueError):
            parse_inbound_event(bad)


def test_encode_event():
    assert encode_event(create_error_event("ROOM_FULL", "Room is full")) == (
        '{"t":"error","code":"ROOM_FULL","msg":"Room is full"}'
    )


@pytest.mark.asyncio
async def test_background_tasks_are_held_until_done():
    finished = []

    async def job():
        await asyncio.sleep(0)
        finished.append(True)

    task = spawn(job())
    assert task in background_tasks

    await task
    await asyncio.sleep(0)
    assert finished == [True]
    assert task not in background_tasks
