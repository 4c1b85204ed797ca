"""
Turn simulator for simultaneous-move snake games.

Rules applied to every live snake at once, all checks against one snapshot:
- The head advances one cell in its assigned direction
- Health decreases by 1; eating food resets it to 100
- The tail is trimmed unless the snake ate (never on the opening turns)
- Death on wall, starvation, any body segment, or head-to-head with an
  equal or longer snake
"""

import itertools
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterator

from snakebrain.geometry import (
    DIRECTIONS,
    OPPOSITE,
    in_bounds,
    proximity_penalty,
    proximity_radius,
    step,
)
from snakebrain.models import MAX_HEALTH, Board, GameState, Snake, last_direction

# Turns up to and including this one are the opening: snakes are still
# unstacking, so they cannot reverse and eating does not grow them.
FIRST_TURN = 1

JointMove = tuple[str, ...]
StepCost = Callable[[GameState, GameState], float]


# ── Joint-move enumeration ────────────────────────────────────────

@lru_cache(maxsize=None)
def joint_moves(n: int) -> tuple[JointMove, ...]:
    """
    Every assignment of a direction to each of `n` snakes, 4**n in total.
    Position i is the move of the i-th snake in board order.
    """
    return tuple(itertools.product(DIRECTIONS, repeat=n))


# ── Simulation ────────────────────────────────────────────────────

@dataclass(frozen=True)
class TurnResult:
    board: Board
    eliminated: dict[str, str]  # snake id -> reason
    eaten: frozenset


def advance(state: GameState, joint: JointMove, reject_reversal: bool = True) -> TurnResult | None:
    """
    Apply one joint move to the board.

    Returns None when `reject_reversal` is set and some snake would turn
    back on itself after the opening. The referee in localgame passes
    False, since a real reversal is just a neck collision.
    """
    snakes = state.board.snakes
    if len(joint) != len(snakes):
        raise ValueError(f"joint move has {len(joint)} entries for {len(snakes)} snakes")

    opening = state.turn <= FIRST_TURN
    if reject_reversal and not opening:
        for snake, direction in zip(snakes, joint):
            last = last_direction(snake)
            if last is not None and direction == OPPOSITE[last]:
                return None

    food = state.board.food
    eaten = set()
    moved = []
    for snake, direction in zip(snakes, joint):
        head = step(snake.head, direction)
        health = snake.health - 1
        ate = head in food
        if ate:
            health = MAX_HEALTH
            eaten.add(head)
        if ate and not opening:
            body = (head,) + snake.body
        else:
            body = (head,) + snake.body[:-1]
        moved.append(Snake(id=snake.id, name=snake.name, health=health, body=body))

    eliminated = _eliminations(moved, state.board.width, state.board.height)
    board = Board(
        width=state.board.width,
        height=state.board.height,
        food=food - eaten,
        snakes=tuple(s for s in moved if s.id not in eliminated),
    )
    return TurnResult(board=board, eliminated=eliminated, eaten=frozenset(eaten))


def _eliminations(moved: list[Snake], width: int, height: int) -> dict[str, str]:
    # Every check reads the post-move positions of all snakes, including
    # the ones dying this turn. Nothing cascades within a turn.
    segments = {}
    for snake in moved:
        for cell in snake.body[1:]:
            segments.setdefault(cell, snake.id)

    eliminated = {}
    for snake in moved:
        if not in_bounds(snake.head, width, height):
            eliminated[snake.id] = "wall collision"
        elif snake.health <= 0:
            eliminated[snake.id] = "starvation"
        elif snake.head in segments:
            eliminated[snake.id] = f"body collision with {segments[snake.head]}"
        else:
            for other in moved:
                if other is not snake and other.head == snake.head and other.length >= snake.length:
                    eliminated[snake.id] = f"head-to-head with {other.id}"
                    break
    return eliminated


def simulate(state: GameState, joint: JointMove) -> GameState | None:
    """Next state, or None if the move is a reversal or the controlled snake dies."""
    result = advance(state, joint)
    if result is None:
        return None
    nxt = next_state(state, result)
    return nxt if nxt.you is not None else None


def next_state(state: GameState, result: TurnResult) -> GameState:
    return GameState(
        game_id=state.game_id,
        turn=state.turn + 1,
        board=result.board,
        you_id=state.you_id,
    )


# ── Successors ────────────────────────────────────────────────────

def expand(state: GameState) -> Iterator[tuple[JointMove, GameState | None]]:
    """Every joint move with its outcome, pruned branches included as None."""
    for joint in joint_moves(len(state.board.snakes)):
        yield joint, simulate(state, joint)


def successors(
    state: GameState,
    cost: StepCost | None = None,
    deadline: float | None = None,
) -> list[tuple[GameState, float]]:
    """
    All surviving next states with their step cost, in enumeration order.
    Past `deadline` (a time.monotonic() value) enumeration stops and the
    states found so far are returned.
    """
    cost = cost or uniform_cost
    found = []
    for joint in joint_moves(len(state.board.snakes)):
        if deadline is not None and time.monotonic() > deadline:
            break
        nxt = simulate(state, joint)
        if nxt is not None:
            found.append((nxt, cost(state, nxt)))
    return found


# ── Step costs ────────────────────────────────────────────────────

LOW_HEALTH = 25
LOW_HEALTH_WEIGHT = 2.0
PROXIMITY_WEIGHT = 2.0
EDGE_PENALTY = 0.5


def uniform_cost(prev: GameState, nxt: GameState) -> float:
    return 1.0


def risk_cost(prev: GameState, nxt: GameState) -> float:
    """
    1 per ply plus penalties for low health, for standing near the head of
    a longer snake, and for hugging the outer ring of the board.
    """
    you = nxt.you
    board = nxt.board
    cost = 1.0

    if you.health < LOW_HEALTH:
        cost += LOW_HEALTH_WEIGHT * (LOW_HEALTH - you.health) / LOW_HEALTH

    threats = [s.head for s in nxt.opponents if s.length > you.length]
    radius = proximity_radius(board.width, board.height)
    cost += proximity_penalty(you.head, threats, radius, PROXIMITY_WEIGHT)

    x, y = you.head
    if x in (0, board.width - 1) or y in (0, board.height - 1):
        cost += EDGE_PENALTY
    return cost


COST_MODELS: dict[str, StepCost] = {
    "uniform": uniform_cost,
    "risk": risk_cost,
}
