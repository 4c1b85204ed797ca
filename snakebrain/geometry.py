"""
Grid geometry.

(0,0) is the top-left cell and y grows downward, so "up" decreases y.
"""

Cell = tuple[int, int]

# Enumeration order doubles as the tie-break order everywhere.
DIRECTIONS: dict[str, Cell] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

OPPOSITE = {
    "up": "down",
    "down": "up",
    "left": "right",
    "right": "left",
}


def step(cell: Cell, direction: str) -> Cell:
    """Return the cell one move away in `direction`."""
    dx, dy = DIRECTIONS[direction]
    return (cell[0] + dx, cell[1] + dy)


def neighbors(cell: Cell) -> list[tuple[str, Cell]]:
    return [(d, step(cell, d)) for d in DIRECTIONS]


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def in_bounds(cell: Cell, width: int, height: int) -> bool:
    return 0 <= cell[0] < width and 0 <= cell[1] < height


def direction_between(src: Cell, dst: Cell) -> str | None:
    """Direction that moves `src` onto an adjacent `dst`, or None."""
    delta = (dst[0] - src[0], dst[1] - src[1])
    for direction, d in DIRECTIONS.items():
        if d == delta:
            return direction
    return None


def proximity_radius(width: int, height: int, fraction: float = 0.25) -> int:
    """Reach of a threat's influence, proportional to the board size."""
    return max(1, int(max(width, height) * fraction))


def proximity_penalty(cell: Cell, sources: list[Cell], radius: int, weight: float) -> float:
    """
    Sum of linearly decaying penalties from each source: `weight` on the
    source itself, falling to zero at `radius`.
    """
    total = 0.0
    for src in sources:
        d = manhattan(cell, src)
        if d < radius:
            total += weight * (radius - d) / radius
    return total
