"""
Single-snake grid search.

Other snakes are frozen in place for one ply and treated as walls. The
search start is always free, and so is the goal, which lets a query end on
a head or a tail.
"""

import heapq
from typing import Callable, Iterable

from snakebrain.geometry import Cell, in_bounds, manhattan, neighbors
from snakebrain.models import Board

ExtraCost = Callable[[Cell], float]


def obstacle_cells(board: Board, traversable: Iterable[Cell] = ()) -> set[Cell]:
    """Every occupied cell on the board, minus the ones explicitly allowed."""
    cells = set()
    for snake in board.snakes:
        cells.update(snake.body)
    cells.difference_update(traversable)
    return cells


def shortest_path(
    start: Cell,
    goal: Cell,
    width: int,
    height: int,
    obstacles: set[Cell],
    extra_cost: ExtraCost | None = None,
) -> tuple[float | None, list[Cell] | None]:
    """
    A* from start to goal with unit steps plus `extra_cost(cell)` for
    entering a cell. Returns (cost, path) where path excludes the start,
    or (None, None) when the goal is unreachable.

    Extra costs are non-negative, so the Manhattan heuristic stays
    admissible. Neighbours are expanded in direction order and heap ties
    fall back to insertion order, which keeps results deterministic.
    """
    if start == goal:
        return 0.0, []

    counter = 0
    open_set = [(manhattan(start, goal), 0.0, counter, start)]
    g_scores = {start: 0.0}
    came_from: dict[Cell, Cell] = {}
    closed = set()

    while open_set:
        _, g, _, current = heapq.heappop(open_set)

        if current == goal:
            path = []
            while current in came_from:
                path.append(current)
                current = came_from[current]
            path.reverse()
            return g, path

        if current in closed:
            continue
        closed.add(current)

        for _, nxt in neighbors(current):
            if not in_bounds(nxt, width, height):
                continue
            if nxt in obstacles and nxt != goal:
                continue
            tentative = g + 1.0 + (extra_cost(nxt) if extra_cost else 0.0)
            if nxt in g_scores and tentative >= g_scores[nxt]:
                continue
            g_scores[nxt] = tentative
            came_from[nxt] = current
            counter += 1
            heapq.heappush(open_set, (tentative + manhattan(nxt, goal), tentative, counter, nxt))

    return None, None
