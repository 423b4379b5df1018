"""
Game engine: game creation and state transitions.

Every transition is a pure function from (state, move) to a new state. The
input state is deep-copied before anything changes, so a failed move leaves
the caller's state exactly as it was.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .constants import CARDS_PER_HAND, MAX_PLAYERS, MIN_PLAYERS
from .effects import advance_turn, apply_card_effect, draw_card_from_pile
from .errors import (
    CardNotInHandError, IllegalMoveError, InvalidPlayerCountError,
    NoValidStartCardError, UnknownMoveError, WrongPhaseError
)
from .models import (
    CardType, Direction, GamePhase, GameResult, GameState, Move, MoveType, Player
)
from .rules import RuleConfig, create_rules
from .shuffle import RNG, calculate_hand_score, create_deck, deal_cards
from .validate import has_stackable_card, legal_moves, parse_move

logger = logging.getLogger(__name__)

PlayerSpec = Mapping[str, Any]


def _engine_rng(state: GameState) -> RNG:
    return RNG(f"{state.seed}{len(state.discard_pile)}")


def _resolve_settings(settings: Union[RuleConfig, Mapping[str, Any], None]) -> RuleConfig:
    if settings is None:
        return RuleConfig()
    if isinstance(settings, RuleConfig):
        return settings.model_copy()
    return create_rules(**settings)


def create_game(
    players: List[PlayerSpec],
    seed: str,
    settings: Union[RuleConfig, Mapping[str, Any], None] = None,
    game_id: Optional[str] = None
) -> GameState:
    """
    Create a new round: shuffle, deal seven cards each and turn up a start card.

    Args:
        players: 2-4 entries with "id", "name" and optional "is_bot"
        seed: Seed string for the shuffle
        settings: RuleConfig or a mapping of overrides
        game_id: Optional game id (defaults to one derived from the seed)

    Returns:
        Initial game state with the first listed player to move

    Raises:
        InvalidPlayerCountError: If there are not 2-4 players
        NoValidStartCardError: If no non-wild card is left to start the discard pile
    """
    if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
        raise InvalidPlayerCountError(
            f"Game requires {MIN_PLAYERS}-{MAX_PLAYERS} players (got {len(players)})"
        )

    rules = _resolve_settings(settings)
    rng = RNG(seed)
    deck = rng.shuffle(create_deck())
    player_ids = [p["id"] for p in players]
    hands, remaining = deal_cards(deck, player_ids, CARDS_PER_HAND)

    # Turn up cards until a non-wild one shows. Turned-up wilds go to the
    # bottom of the draw pile so all 108 cards stay in play.
    top_card = None
    skipped = []
    while top_card is None or top_card.is_wild:
        if top_card is not None:
            skipped.append(top_card)
        if not remaining:
            raise NoValidStartCardError("No valid starting card found")
        top_card = remaining.pop()
    remaining[:0] = skipped

    state = GameState(
        id=game_id or f"game-{seed}",
        seed=seed,
        players=[
            Player(
                id=p["id"],
                name=p.get("name", p["id"]),
                is_bot=bool(p.get("is_bot", p.get("isBot", False))),
                hand_size=len(hands[p["id"]]),
            )
            for p in players
        ],
        current_player_id=player_ids[0],
        top_card=top_card,
        current_color=top_card.color,
        direction=Direction.CLOCKWISE,
        draw_pile=remaining,
        discard_pile=[top_card],
        player_hands=hands,
        settings=rules,
    )
    logger.debug(f"Created {state.id} for {len(players)} players, top card {top_card.id}")
    return state


def _bump_hand_size(state: GameState, player_id: str, delta: int) -> None:
    player = state.get_player(player_id)
    player.hand_size += delta


def _apply_play_card(state: GameState, move: Move, rng: RNG) -> GameState:
    player_id = state.current_player_id
    hand = state.player_hands[player_id]
    card_index = next((i for i, c in enumerate(hand) if c.id == move.card_id), None)
    if card_index is None:
        raise CardNotInHandError(f"Player {player_id} does not hold card {move.card_id}")

    if move not in legal_moves(state, player_id):
        raise IllegalMoveError(f"Card {move.card_id} cannot be played now")

    card = hand.pop(card_index)
    _bump_hand_size(state, player_id, -1)
    state.discard_pile.append(card)
    state.top_card = card

    apply_card_effect(state, card, move.chosen_color)

    state.can_play_drawn_card = False
    state.last_drawn_card = None

    if not hand:
        state.phase = GamePhase.ROUND_END
        logger.info(f"Player {player_id} emptied their hand in {state.id}")
        return state

    # Skip has already moved the turn along
    if card.type != CardType.SKIP:
        advance_turn(state)

    return state


def _apply_draw_card(state: GameState, rng: RNG) -> GameState:
    player_id = state.current_player_id
    forced = state.draw_count > 0
    amount = max(1, state.draw_count)

    for _ in range(amount):
        card = draw_card_from_pile(state, rng)
        if card is None:
            continue
        state.player_hands[player_id].append(card)
        _bump_hand_size(state, player_id, 1)
        state.get_player(player_id).called_spell = False

        if not forced:
            # Voluntary draw: the player now plays this card or passes
            state.last_drawn_card = card
            state.can_play_drawn_card = True
            return state

    state.draw_count = 0
    advance_turn(state)
    return state


def _apply_pass_turn(state: GameState) -> GameState:
    state.can_play_drawn_card = False
    state.last_drawn_card = None
    advance_turn(state)
    return state


def _apply_call_uno(state: GameState) -> GameState:
    state.current_player.called_spell = True
    return state


def apply_move(
    state: GameState,
    move: Union[Move, Mapping[str, Any]],
    rng: Optional[RNG] = None
) -> GameState:
    """
    Apply a move for the current player.

    Args:
        state: Current state (never modified)
        move: Move or wire-format dict
        rng: Optional RNG for reshuffles (defaults to one derived from the
            seed and the discard pile length)

    Returns:
        The new game state

    Raises:
        WrongPhaseError: If the game is not being played
        UnknownMoveError: If the move kind is not recognised
        CardNotInHandError: If a played card is not in the current hand
        IllegalMoveError: If a play is not among the legal moves
    """
    if state.phase != GamePhase.PLAYING:
        raise WrongPhaseError(f"Cannot apply a move in phase {state.phase.value}")

    move = parse_move(move)
    current_rng = rng or _engine_rng(state)
    new_state = copy.deepcopy(state)

    if move.type == MoveType.PLAY_CARD:
        return _apply_play_card(new_state, move, current_rng)
    if move.type == MoveType.DRAW_CARD:
        return _apply_draw_card(new_state, current_rng)
    if move.type == MoveType.PASS_TURN:
        return _apply_pass_turn(new_state)
    if move.type == MoveType.CALL_UNO:
        return _apply_call_uno(new_state)
    raise UnknownMoveError(f"Unknown move type: {move.type}")


def apply_automatic_draw_cards(state: GameState, rng: Optional[RNG] = None) -> GameState:
    """
    Resolve a pending forced draw when the current player has no choice.

    Returns the same state object unchanged when nothing is pending or when
    stacking is enabled and the player holds a card that can stack.
    """
    if state.draw_count == 0:
        return state

    if state.settings.stack_draw_cards and has_stackable_card(state, state.current_player_id):
        return state

    current_rng = rng or _engine_rng(state)
    new_state = copy.deepcopy(state)
    logger.debug(f"Auto-drawing {state.draw_count} cards for {state.current_player_id}")
    return _apply_draw_card(new_state, current_rng)


def is_terminal(state: GameState) -> bool:
    return state.phase in (GamePhase.ROUND_END, GamePhase.GAME_END)


def score(state: GameState) -> GameResult:
    """Score remaining hands; the winner is the player with an empty hand."""
    scores: Dict[str, int] = {}
    winner = None

    for player in state.players:
        hand = state.hand_of(player.id)
        scores[player.id] = calculate_hand_score(hand)
        if not hand:
            winner = player.id

    return GameResult(winner=winner, scores=scores, is_terminal=is_terminal(state))

