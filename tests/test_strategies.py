import time

import pytest

from conftest import make_snake, make_state, wire_snake
from snakebrain.config import POLICY_NAMES, SearchConfig
from snakebrain.models import InvalidGameState
from snakebrain.strategies import (
    POLICIES,
    choose_move,
    decide_move,
    exhaustive,
    greedy,
    lookahead,
    move_towards,
    safe_default_move,
)


def _lone_snake_payload():
    you = wire_snake("you", [(5, 5), (5, 6), (5, 7)])
    return {
        "game": {"id": "g1"},
        "turn": 10,
        "board": {"height": 11, "width": 11, "food": [{"x": 5, "y": 4}], "snakes": [you]},
        "you": you,
    }


def _contested_state():
    # Both heads are one step from (3, 2); equal length means a tie kills both.
    me = make_snake("you", [(3, 3), (3, 4), (3, 5)])
    opp = make_snake("opp", [(3, 1), (2, 1), (1, 1)])
    return make_state([me, opp], width=7, height=7)


def _boxed_state():
    me = make_snake("you", [(0, 0), (1, 0), (1, 1), (0, 1), (0, 2)])
    return make_state([me], width=2, height=3)


def test_registry_matches_config_names():
    assert tuple(POLICIES) == POLICY_NAMES


# ── Greedy ────────────────────────────────────────────────────────

def test_greedy_heads_for_food_when_alone():
    assert decide_move(_lone_snake_payload(), SearchConfig(policy="greedy")) == "up"


def test_greedy_hunts_shorter_head():
    me = make_snake("you", [(2, 5), (2, 6), (2, 7), (2, 8)])
    prey = make_snake("prey", [(6, 5), (7, 5)])
    state = make_state([me, prey], food=[(2, 0)])
    assert greedy(state, SearchConfig()) == "right"


def test_greedy_chases_tail_without_food():
    state = make_state([make_snake("you", [(5, 5), (5, 6), (5, 7)])])
    assert greedy(state, SearchConfig()) in ("left", "right")


def test_greedy_is_deterministic():
    me = make_snake("you", [(5, 5), (5, 6), (5, 7)])
    opp = make_snake("opp", [(8, 8), (8, 9), (8, 10), (7, 10)])
    state = make_state([me, opp], food=[(2, 2), (8, 2), (2, 8)])
    moves = {greedy(state, SearchConfig()) for _ in range(5)}
    assert len(moves) == 1


# ── Tree searches ─────────────────────────────────────────────────

@pytest.mark.parametrize("policy", [exhaustive, lookahead])
def test_search_avoids_contested_cell(policy):
    config = SearchConfig(horizon=3, max_expansions=500, depth=3, max_nodes=2000)
    assert policy(_contested_state(), config) in ("left", "right")


@pytest.mark.parametrize("policy", [exhaustive, lookahead])
def test_search_falls_back_when_every_move_dies(policy):
    assert policy(_boxed_state(), SearchConfig()) == "down"


@pytest.mark.parametrize("name", POLICY_NAMES)
def test_policies_never_reverse_and_repeat(name):
    state = make_state([make_snake("you", [(5, 5), (5, 6), (5, 7)])], food=[(1, 1)])
    config = SearchConfig(policy=name, horizon=2, max_expansions=50, depth=2, max_nodes=50)
    first = choose_move(state, config)
    assert first in ("up", "left", "right")
    assert choose_move(state, config) == first


def test_exhaustive_respects_tiny_budget():
    me = make_snake("you", [(5, 5), (5, 6), (5, 7)])
    others = [
        make_snake("a", [(1, 1), (1, 2), (1, 3)]),
        make_snake("b", [(9, 9), (9, 8), (9, 7)]),
        make_snake("c", [(1, 9), (2, 9), (3, 9)]),
    ]
    state = make_state([me] + others)
    move = exhaustive(state, SearchConfig(horizon=50, max_expansions=1))
    assert move in ("up", "left", "right")


def test_exhaustive_risk_cost_model():
    state = _contested_state()
    assert exhaustive(state, SearchConfig(cost="risk", horizon=2)) in ("left", "right")


# ── Move selection ────────────────────────────────────────────────

def test_safe_default_move_avoids_walls_and_reversal():
    state = make_state([make_snake("you", [(0, 0), (1, 0), (2, 0)])])
    assert safe_default_move(state) == "down"


def test_safe_default_move_without_you():
    state = make_state([make_snake("other", [(5, 5)])])
    assert safe_default_move(state) == "up"


def test_move_towards_adjacent_head():
    state = make_state([make_snake("you", [(5, 5), (5, 6), (5, 7)])])
    nxt = make_state([make_snake("you", [(6, 5), (5, 5), (5, 6)])])
    assert move_towards(state, nxt) == "right"


def test_move_towards_non_adjacent_falls_back():
    state = make_state([make_snake("you", [(5, 5), (5, 6), (5, 7)])])
    nxt = make_state([make_snake("you", [(9, 9)])])
    assert move_towards(state, nxt) == safe_default_move(state)


def test_decide_move_rejects_malformed_payload():
    with pytest.raises(InvalidGameState):
        decide_move({"board": {"width": 11}})


def _six_snake_state():
    me = make_snake("you", [(5, 5), (5, 6), (5, 7)])
    others = [
        make_snake(f"s{x}", [(x, 5), (x, 6), (x, 7)]) for x in (1, 3, 7, 9)
    ] + [make_snake("top", [(5, 1), (5, 2), (5, 3)])]
    return make_state([me] + others)


@pytest.mark.parametrize("name", ["exhaustive", "lookahead"])
def test_six_snakes_answer_within_time_budget(name):
    config = SearchConfig(policy=name, horizon=5, max_expansions=100000, max_nodes=100000, time_budget_ms=200)
    started = time.monotonic()
    move = choose_move(_six_snake_state(), config)
    elapsed = time.monotonic() - started
    assert move in ("up", "down", "left", "right")
    assert elapsed < 1.5


def test_greedy_avoids_food_beside_longer_head():
    me = make_snake("you", [(5, 5), (5, 6), (5, 7)])
    big = make_snake("big", [(2, 5), (1, 5), (0, 5), (0, 4)])
    food = [(3, 5), (7, 5)]
    # Alone, equal-distance food goes to the first in sorted order.
    assert greedy(make_state([me], food=food), SearchConfig()) == "left"
    assert greedy(make_state([me, big], food=food), SearchConfig()) == "right"


def test_lookahead_avoids_dead_end_pocket():
    # Moving up enters (0, 0), walled in by the board and our own body.
    me = make_snake("you", [(0, 1), (1, 1), (1, 0), (2, 0), (2, 1), (2, 2), (2, 3), (1, 3)])
    state = make_state([me], width=3, height=4)
    assert lookahead(state, SearchConfig(depth=3)) == "down"


def test_exhaustive_uniform_cost_takes_first_surviving_direction():
    assert exhaustive(_contested_state(), SearchConfig(horizon=3)) == "left"
