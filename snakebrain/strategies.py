"""
Move decision policies.

Every policy takes a GameState and a SearchConfig and returns one of
"up", "down", "left", "right". Three archetypes share the simulator:
1. exhaustive - best-first search over joint states to a goal or budget
2. lookahead  - depth-bounded tree search scored by how far we survive
3. greedy     - single-snake shortest paths to food, prey or a tail
"""

import heapq
import logging
import time
from typing import Callable

from snakebrain.config import SearchConfig
from snakebrain.engine import (
    COST_MODELS,
    PROXIMITY_WEIGHT,
    advance,
    joint_moves,
    next_state,
    successors,
)
from snakebrain.geometry import (
    DIRECTIONS,
    OPPOSITE,
    Cell,
    direction_between,
    in_bounds,
    proximity_penalty,
    proximity_radius,
    step,
)
from snakebrain.models import GameState, last_direction
from snakebrain.pathing import ExtraCost, obstacle_cells, shortest_path

logger = logging.getLogger(__name__)

Policy = Callable[[GameState, SearchConfig], str]


# ── Move selection ────────────────────────────────────────────────

def safe_default_move(state: GameState) -> str:
    """
    Deterministic last resort: the first direction that stays on the
    board, doesn't reverse and doesn't run into a body. Tails that will
    move this turn count as free.
    """
    you = state.you
    if you is None:
        return "up"
    board = state.board

    occupied = set()
    for snake in board.snakes:
        body = snake.body
        for i, seg in enumerate(body):
            if i == len(body) - 1 and len(body) > 1 and body[-1] != body[-2]:
                continue
            occupied.add(seg)

    last = last_direction(you)
    reverse = OPPOSITE[last] if last else None
    candidates = [d for d in DIRECTIONS if d != reverse and in_bounds(step(you.head, d), board.width, board.height)]

    for direction in candidates:
        if step(you.head, direction) not in occupied:
            return direction
    if candidates:
        return candidates[0]
    return "up"


def move_towards(state: GameState, nxt: GameState) -> str:
    """Direction that takes the controlled head from `state` to `nxt`."""
    direction = None
    if state.you is not None and nxt.you is not None:
        direction = direction_between(state.you.head, nxt.you.head)
    return direction or safe_default_move(state)


def _deadline(config: SearchConfig) -> float:
    return time.monotonic() + config.time_budget_ms / 1000.0


def _root_branches(state: GameState, deadline: float | None = None) -> dict[str, list[GameState]]:
    """
    Surviving first-ply states grouped by our own move.

    A move is contested when at least one opponent reply kills us. If any
    uncontested move survives, only those are returned. Past `deadline`
    the joint moves not yet simulated are skipped.
    """
    snakes = state.board.snakes
    index = next(i for i, s in enumerate(snakes) if s.id == state.you_id)

    branches: dict[str, list[GameState]] = {d: [] for d in DIRECTIONS}
    contested = set()
    for joint in joint_moves(len(snakes)):
        if deadline is not None and time.monotonic() > deadline:
            logger.debug("root expansion cut short by the time budget")
            break
        result = advance(state, joint)
        if result is None:
            continue
        mine = joint[index]
        if state.you_id in result.eliminated:
            contested.add(mine)
        else:
            branches[mine].append(next_state(state, result))

    alive = {d: b for d, b in branches.items() if b}
    safe = {d: b for d, b in alive.items() if d not in contested}
    return safe or alive


# ── Strategy 1: Exhaustive best-first search ─────────────────────

def _is_full_board(state: GameState) -> bool:
    you = state.you
    return len(state.board.snakes) == 1 and you is not None and you.length >= state.board.area


def exhaustive(state: GameState, config: SearchConfig) -> str:
    """
    A* over joint states. Goal is filling the board alone or surviving
    `horizon` plies; the search stops after `max_expansions` states or
    `time_budget_ms`, whichever comes first. If no goal turns up, the
    deepest path explored decides the move.

    Opponents are not adversaries here: a path is any joint-move line, so
    it only has to exist for one choice of opponent moves. With uniform
    cost every frontier entry has the same f, the heap falls back to
    insertion order and the search runs breadth-first, so the answer is
    the first move in direction order (after the root guard) with a line
    that survives to the horizon. The risk cost model separates them.
    """
    if state.you is None:
        return safe_default_move(state)
    deadline = _deadline(config)
    roots = _root_branches(state, deadline)
    if not roots:
        return safe_default_move(state)

    cost = COST_MODELS[config.cost]
    start = state.turn
    area = state.board.area

    def remaining(node: GameState) -> int:
        # Each ply costs at least 1, so plies left to the nearest goal is admissible.
        return min(config.horizon - (node.turn - start), max(area - node.you.length, 0))

    counter = 0
    frontier = []
    best_g = {}
    for states in roots.values():
        for nxt in states:
            g = cost(state, nxt)
            if nxt in best_g and best_g[nxt] <= g:
                continue
            best_g[nxt] = g
            counter += 1
            heapq.heappush(frontier, (g + remaining(nxt), counter, g, nxt, nxt))

    # Frontier entries carry the first-ply state their path started from.
    best = None  # (depth, -g, -order) of the deepest path popped
    best_first = None
    expansions = 0
    while frontier:
        _, order, g, node, first = heapq.heappop(frontier)
        if g > best_g.get(node, g):
            continue
        depth = node.turn - start
        if depth >= config.horizon or _is_full_board(node):
            logger.debug("exhaustive: goal at depth %d after %d expansions", depth, expansions)
            return move_towards(state, first)

        key = (depth, -g, -order)
        if best is None or key > best:
            best, best_first = key, first

        expansions += 1
        if expansions > config.max_expansions:
            logger.debug("exhaustive: budget of %d expansions spent", config.max_expansions)
            break
        if time.monotonic() > deadline:
            logger.debug("exhaustive: time budget spent after %d expansions", expansions)
            break

        for nxt, step_cost in successors(node, cost, deadline):
            ng = g + step_cost
            if nxt in best_g and best_g[nxt] <= ng:
                continue
            best_g[nxt] = ng
            counter += 1
            heapq.heappush(frontier, (ng + remaining(nxt), counter, ng, nxt, first))

    if best_first is None:
        return safe_default_move(state)
    return move_towards(state, best_first)


# ── Strategy 2: Depth-bounded lookahead ──────────────────────────

def lookahead(state: GameState, config: SearchConfig) -> str:
    """
    For each first move, walk the joint-move tree to `depth` plies and
    score it by the deepest ply any line survives to, then by how many
    first-ply outcomes survive. The node budget and
    `time_budget_ms` are both split evenly between first moves.
    """
    if state.you is None:
        return safe_default_move(state)
    deadline = _deadline(config)
    roots = _root_branches(state, deadline)
    if not roots:
        return safe_default_move(state)

    per_move = max(1, config.max_nodes // len(roots))
    scores = {}
    for done, (direction, states) in enumerate(roots.items()):
        # Each move gets an equal share of whatever time is left.
        now = time.monotonic()
        move_deadline = now + max(deadline - now, 0.0) / (len(roots) - done)
        deepest = 1
        visited = 0
        stack = [(s, 1) for s in reversed(states)]
        while stack and visited < per_move and deepest < config.depth and time.monotonic() <= move_deadline:
            node, depth = stack.pop()
            visited += 1
            deepest = max(deepest, depth)
            if depth >= config.depth:
                continue
            for nxt, _ in reversed(successors(node, deadline=move_deadline)):
                stack.append((nxt, depth + 1))
        scores[direction] = (deepest, len(states))
        logger.debug("lookahead: %s reaches ply %d (%d nodes)", direction, deepest, visited)

    # max() keeps the first of equal scores, so direction order breaks ties.
    return max(scores, key=scores.get)


# ── Strategy 3: Greedy path planning ─────────────────────────────

def _cheapest_path(
    state: GameState,
    targets: list[Cell],
    obstacles: set[Cell],
    extra_cost: ExtraCost | None = None,
) -> list[Cell] | None:
    you = state.you
    board = state.board
    neck = you.body[1] if len(you.body) > 1 and you.body[1] != you.head else None

    best = None
    for index, target in enumerate(targets):
        cost, path = shortest_path(you.head, target, board.width, board.height, obstacles, extra_cost)
        if not path or path[0] == neck:
            continue
        if best is None or (cost, index) < best[:2]:
            best = (cost, index, path)
    return best[2] if best else None


def greedy(state: GameState, config: SearchConfig) -> str:
    """
    Tiered targets, first tier with a reachable target wins:
    1. food, when someone is at least our size or we're alone, with cells
       near those snakes' heads made expensive
    2. the head of a shorter snake
    3. any snake's tail
    """
    you = state.you
    if you is None:
        return safe_default_move(state)
    board = state.board
    obstacles = obstacle_cells(board, traversable=[you.head])
    opponents = state.opponents

    threats = [o.head for o in opponents if o.length >= you.length]
    radius = proximity_radius(board.width, board.height)

    def near_threat(cell: Cell) -> float:
        return proximity_penalty(cell, threats, radius, PROXIMITY_WEIGHT)

    tiers = []
    if threats or not opponents:
        tiers.append((sorted(board.food), near_threat))
    tiers.append(([o.head for o in opponents if o.length < you.length], None))
    tiers.append(([s.tail for s in board.snakes], None))

    for targets, extra in tiers:
        path = _cheapest_path(state, targets, obstacles, extra)
        if path:
            return direction_between(you.head, path[0])
    return safe_default_move(state)


# Registry for easy access
POLICIES: dict[str, Policy] = {
    "exhaustive": exhaustive,
    "lookahead": lookahead,
    "greedy": greedy,
}


def choose_move(state: GameState, config: SearchConfig | None = None) -> str:
    """Run the configured policy on an already decoded state."""
    config = config or SearchConfig()
    move = POLICIES[config.policy](state, config)
    if move not in DIRECTIONS:
        return safe_default_move(state)
    return move


def decide_move(data: dict, config: SearchConfig | None = None) -> str:
    """Decode the wire payload and choose a move. Raises InvalidGameState."""
    return choose_move(GameState.from_dict(data), config)
