"""
State serialization and redaction utilities.
"""

import logging
import time
from typing import Any, Dict, Optional

import orjson

from .constants import SERIALIZATION_VERSION
from .models import (
    Card, CardColor, Direction, GamePhase, GameState, Player
)
from .rules import RuleConfig

logger = logging.getLogger(__name__)


def redacted_view(state: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Project game state for one viewer.

    Args:
        state: Full game state
        viewer_id: ID of the player viewing the state (None for a spectator)

    Returns:
        State dictionary safe for transmission: the draw pile becomes a count,
        every hand becomes {"count"} except the viewer's, which is
        {"count", "cards"}. The seed is left out, as it would reveal the
        draw pile order.
    """
    sanitized = {
        "id": state.id,
        "phase": state.phase.value,
        "players": [_serialize_player(player) for player in state.players],
        "current_player_id": state.current_player_id,
        "direction": state.direction.value,
        "top_card": state.top_card.to_dict(),
        "current_color": state.current_color.value,
        "discard_pile": [card.to_dict() for card in state.discard_pile],
        "draw_pile_count": len(state.draw_pile),
        "player_hands": {},
        "draw_count": state.draw_count,
        "can_play_drawn_card": state.can_play_drawn_card,
        "settings": state.settings.model_dump(),
    }

    for player in state.players:
        hand = state.hand_of(player.id)
        if player.id == viewer_id:
            cards = [card.to_dict() for card in hand]
            sanitized["player_hands"][player.id] = {"count": len(hand), "cards": cards}
            sanitized["your_hand"] = list(cards)
        else:
            sanitized["player_hands"][player.id] = {"count": len(hand)}

    # The drawn card is only known to the player who drew it
    if (
        viewer_id is not None
        and viewer_id == state.current_player_id
        and state.last_drawn_card is not None
    ):
        sanitized["last_drawn_card"] = state.last_drawn_card.to_dict()

    return sanitized


def _serialize_player(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "is_bot": player.is_bot,
        "hand_size": player.hand_size,
        "called_spell": player.called_spell,
    }


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Full, unredacted state as plain data. Never send this to a client."""
    return {
        "id": state.id,
        "seed": state.seed,
        "phase": state.phase.value,
        "players": [_serialize_player(player) for player in state.players],
        "current_player_id": state.current_player_id,
        "direction": state.direction.value,
        "top_card": state.top_card.to_dict(),
        "current_color": state.current_color.value,
        "draw_pile": [card.to_dict() for card in state.draw_pile],
        "discard_pile": [card.to_dict() for card in state.discard_pile],
        "player_hands": {
            player_id: [card.to_dict() for card in hand]
            for player_id, hand in state.player_hands.items()
        },
        "draw_count": state.draw_count,
        "can_play_drawn_card": state.can_play_drawn_card,
        "last_drawn_card": state.last_drawn_card.to_dict() if state.last_drawn_card else None,
        "settings": state.settings.model_dump(),
    }


def state_from_dict(data: Dict[str, Any]) -> GameState:
    last_drawn = data.get("last_drawn_card")
    return GameState(
        id=data["id"],
        seed=data["seed"],
        phase=GamePhase(data["phase"]),
        players=[
            Player(
                id=p["id"],
                name=p["name"],
                is_bot=p.get("is_bot", False),
                hand_size=p.get("hand_size", 0),
                called_spell=p.get("called_spell", False),
            )
            for p in data["players"]
        ],
        current_player_id=data["current_player_id"],
        direction=Direction(data["direction"]),
        top_card=Card.from_dict(data["top_card"]),
        current_color=CardColor(data["current_color"]),
        draw_pile=[Card.from_dict(c) for c in data["draw_pile"]],
        discard_pile=[Card.from_dict(c) for c in data["discard_pile"]],
        player_hands={
            player_id: [Card.from_dict(c) for c in hand]
            for player_id, hand in data["player_hands"].items()
        },
        draw_count=data.get("draw_count", 0),
        can_play_drawn_card=data.get("can_play_drawn_card", False),
        last_drawn_card=Card.from_dict(last_drawn) if last_drawn else None,
        settings=RuleConfig(**data.get("settings", {})),
    )


def serialize_state(state: GameState) -> bytes:
    """Snapshot a game state with a timestamp and format version."""
    return orjson.dumps({
        "state": state_to_dict(state),
        "timestamp": time.time(),
        "version": SERIALIZATION_VERSION,
    })


def deserialize_state(payload: bytes) -> GameState:
    """Load a snapshot written by serialize_state."""
    data = orjson.loads(payload)
    version = data.get("version")
    if version != SERIALIZATION_VERSION:
        logger.warning(f"Snapshot version mismatch: expected {SERIALIZATION_VERSION}, got {version}")
    return state_from_dict(data["state"])
