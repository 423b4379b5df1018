from spellstack_engine.bots.heuristic import HeuristicBot, best_color_choice, choose_ai_move
from spellstack_engine.engine import create_game
from spellstack_engine.models import AIDifficulty, CardColor, Move
from spellstack_engine.shuffle import RNG
from spellstack_engine.validate import legal_moves


def test_every_difficulty_returns_legal_move():
    state = create_game([{"id": "p1", "name": "A"}, {"id": "p2", "name": "B"}], "bots")
    for difficulty in AIDifficulty:
        move = choose_ai_move(state, "p1", difficulty)
        assert move in legal_moves(state, "p1")


def test_no_move_when_not_current_player(make_state):
    state = make_state({"p1": ["r5"], "p2": ["r1"]})
    assert choose_ai_move(state, "p2") is None


def test_medium_plays_last_card(make_state):
    state = make_state({"p1": ["r5"], "p2": ["b1"]}, top="r3")
    assert choose_ai_move(state, "p1") == Move.play_card("r5")


def test_medium_prefers_disruptive_cards(make_state):
    state = make_state({"p1": ["r5", "r-skip", "g3"], "p2": ["b1"]}, top="r3")
    assert choose_ai_move(state, "p1") == Move.play_card("r-skip")


def test_medium_prefers_active_color_over_wild(make_state):
    state = make_state({"p1": ["r5", "wild", "g7"], "p2": ["b1"]}, top="r3")
    assert choose_ai_move(state, "p1") == Move.play_card("r5")


def test_medium_wild_names_most_held_color(make_state):
    state = make_state({"p1": ["wild", "g1", "g2", "b4"], "p2": ["b1"]}, top="r9")
    move = choose_ai_move(state, "p1")
    assert move.card_id == "wild"
    assert move.chosen_color == CardColor.GREEN


def test_medium_draws_without_playable_card(make_state):
    state = make_state({"p1": ["g7", "b1"], "p2": ["b1"]}, top="r3")
    assert choose_ai_move(state, "p1") == Move.draw_card()


def test_hard_falls_back_to_medium(make_state):
    state = make_state(
        {"p1": ["r5", "g7"], "p2": ["b1", "b2", "b4"]},
        top="r3"
    )
    assert choose_ai_move(state, "p1", AIDifficulty.HARD) == Move.play_card("r5")


def test_hard_disrupts_when_opponent_is_close(make_state):
    state = make_state({"p1": ["r5", "g7", "r-d2"], "p2": ["b1"]}, top="r3")
    assert choose_ai_move(state, "p1", AIDifficulty.HARD) == Move.play_card("r-d2")


def test_easy_is_reproducible(make_state):
    state = make_state({"p1": ["r5", "r6", "r7", "wild"], "p2": ["b1"]}, top="r3")
    first = choose_ai_move(state, "p1", AIDifficulty.EASY)
    assert first == choose_ai_move(state, "p1", AIDifficulty.EASY)
    assert choose_ai_move(state, "p1", "easy", RNG("fixed")) == choose_ai_move(
        state, "p1", "easy", RNG("fixed")
    )


def test_best_color_choice_ties_keep_current_color(card):
    assert best_color_choice([card("r1"), card("g1")], CardColor.RED) == CardColor.RED
    assert best_color_choice([card("g1"), card("g2"), card("r1")], CardColor.RED) == CardColor.GREEN
    assert best_color_choice([card("wild")], CardColor.BLUE) == CardColor.BLUE


def test_heuristic_bot_acts_on_its_turn(make_state):
    state = make_state({"p1": ["g7"], "p2": ["b1"]}, top="r3")
    bot = HeuristicBot("p1")
    assert bot.choose_action(state) == Move.draw_card()
    assert bot.count_cards_in_hand(state, "p2") == 1
    assert HeuristicBot("p2").choose_action(state) is None
