"""
Local game runner for testing policies against each other.

Plays one game with the same simulator the policies search with:
- Snakes start stacked three deep at the standard spawn points
- Food at the centre plus `initial_food` random cells, more spawns over time
- Each live snake gets its own view of the state and answers with a move
- Last snake alive wins; on the turn limit the longest survivor wins
"""

import logging
import random
from typing import Callable

from snakebrain.engine import advance
from snakebrain.geometry import DIRECTIONS, Cell
from snakebrain.models import MAX_HEALTH, Board, GameState, Snake

logger = logging.getLogger(__name__)

MoveFunc = Callable[[dict], str]


def spawn_points(width: int, height: int) -> list[Cell]:
    return [
        (1, 1), (width - 2, height - 2),
        (1, height - 2), (width - 2, 1),
        (width // 2, 1), (width // 2, height - 2),
        (1, height // 2), (width - 2, height // 2),
    ]


def create_snake(snake_id: str, cell: Cell) -> Snake:
    return Snake(id=snake_id, name=snake_id, health=MAX_HEALTH, body=(cell, cell, cell))


def spawn_food(board: Board, rng: random.Random, count: int = 1) -> Board:
    """Return a board with up to `count` extra food on unoccupied cells."""
    occupied = set(board.food)
    for snake in board.snakes:
        occupied.update(snake.body)
    free = [(x, y) for x in range(board.width) for y in range(board.height) if (x, y) not in occupied]
    picked = rng.sample(free, min(count, len(free)))
    return Board(board.width, board.height, board.food | frozenset(picked), board.snakes)


def run_game(
    strategies: dict[str, MoveFunc],
    width: int = 11,
    height: int = 11,
    max_turns: int = 500,
    seed: int | None = None,
    food_spawn_chance: float = 0.15,
    initial_food: int = 1,
) -> dict:
    """
    Run a full game.

    Args:
        strategies: dict mapping snake_id -> move function taking the wire dict
        width, height: board dimensions
        max_turns: turn limit
        seed: random seed for reproducibility
        food_spawn_chance: probability of spawning food each turn
        initial_food: number of random food to spawn at start

    Returns:
        dict with winner, turns, death_reasons, turn_log, final_snakes
    """
    if len(strategies) > len(spawn_points(width, height)):
        raise ValueError(f"at most {len(spawn_points(width, height))} snakes per game")
    rng = random.Random(seed)

    points = spawn_points(width, height)
    snakes = tuple(create_snake(sid, points[i]) for i, sid in enumerate(strategies))
    board = Board(width, height, frozenset([(width // 2, height // 2)]), snakes)
    board = spawn_food(board, rng, initial_food)

    death_reasons = {}
    turn_log = []
    turn = 0
    while turn < max_turns and len(board.snakes) > 1:
        state = GameState(game_id="local-game", turn=turn, board=board, you_id="")

        moves = {}
        for snake in board.snakes:
            try:
                move = strategies[snake.id](state.view_for(snake.id).to_dict())
            except Exception:
                logger.exception("strategy for %s failed on turn %d", snake.id, turn)
                move = "up"
            moves[snake.id] = move if move in DIRECTIONS else "up"
        logger.debug("turn %d: %s", turn, moves)

        result = advance(state, tuple(moves[s.id] for s in board.snakes), reject_reversal=False)
        for sid, reason in result.eliminated.items():
            death_reasons[sid] = f"{reason} (turn {turn})"

        board = result.board
        if result.eaten or rng.random() < food_spawn_chance:
            board = spawn_food(board, rng, 1)

        turn_log.append({
            "turn": turn,
            "moves": moves,
            "alive": [s.id for s in board.snakes],
            "deaths": dict(result.eliminated),
        })
        turn += 1

    if len(board.snakes) == 1:
        winner = board.snakes[0].id
    elif board.snakes:
        winner = max(board.snakes, key=lambda s: s.length).id
    else:
        winner = None

    return {
        "winner": winner,
        "turns": turn,
        "death_reasons": death_reasons,
        "turn_log": turn_log,
        "final_snakes": {s.id: {"length": s.length, "health": s.health} for s in board.snakes},
    }
