"""
Entity model: snakes, the board and the per-request game state.

All three are frozen so a state handed to one search branch can never be
changed underneath another. The simulator builds new values instead.
"""

from dataclasses import dataclass, replace
from typing import Any

from snakebrain.geometry import Cell, direction_between

MAX_HEALTH = 100


class InvalidGameState(ValueError):
    """The incoming payload cannot be decoded into a GameState."""


@dataclass(frozen=True)
class Snake:
    id: str
    name: str
    health: int
    body: tuple[Cell, ...]  # head first

    @property
    def head(self) -> Cell:
        return self.body[0]

    @property
    def tail(self) -> Cell:
        return self.body[-1]

    @property
    def length(self) -> int:
        return len(self.body)


@dataclass(frozen=True)
class Board:
    width: int
    height: int
    food: frozenset[Cell]
    snakes: tuple[Snake, ...]

    def snake(self, snake_id: str) -> Snake | None:
        for s in self.snakes:
            if s.id == snake_id:
                return s
        return None

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class GameState:
    """
    One turn's view of the game from the controlled snake's side.

    `you` is looked up by id in `board.snakes` on every access, so it can
    never drift from the board. It is None once the controlled snake has
    been eliminated.
    """

    game_id: str
    turn: int
    board: Board
    you_id: str

    @property
    def you(self) -> Snake | None:
        return self.board.snake(self.you_id)

    @property
    def opponents(self) -> list[Snake]:
        return [s for s in self.board.snakes if s.id != self.you_id]

    def view_for(self, snake_id: str) -> "GameState":
        """Same board, seen from another snake."""
        return replace(self, you_id=snake_id)

    @classmethod
    def from_dict(cls, data: dict) -> "GameState":
        """Decode the wire payload. Raises InvalidGameState on bad input."""
        try:
            board_data = data["board"]
            board = Board(
                width=_int(board_data["width"], "board.width"),
                height=_int(board_data["height"], "board.height"),
                food=frozenset(_cell(f) for f in board_data.get("food", [])),
                snakes=tuple(_snake(s) for s in board_data.get("snakes", [])),
            )
            you = _snake(data["you"])
            return cls(
                game_id=str(data.get("game", {}).get("id", "")),
                turn=_int(data.get("turn", 0), "turn"),
                board=board,
                you_id=you.id,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidGameState(f"malformed game state: {e!r}") from e

    def to_dict(self) -> dict:
        """Encode back to the wire shape, with `you` duplicated from the board."""
        snakes = [_snake_dict(s) for s in self.board.snakes]
        you = self.you
        data: dict[str, Any] = {
            "game": {"id": self.game_id},
            "turn": self.turn,
            "board": {
                "height": self.board.height,
                "width": self.board.width,
                "food": [{"x": x, "y": y} for x, y in sorted(self.board.food)],
                "snakes": snakes,
            },
        }
        if you is not None:
            data["you"] = _snake_dict(you)
        return data


def last_direction(snake: Snake) -> str | None:
    """
    Direction the snake moved on its previous turn, derived from head and
    neck. None when the body can't tell: a single segment, a stacked start,
    or a malformed non-adjacent neck.
    """
    if len(snake.body) < 2:
        return None
    return direction_between(snake.body[1], snake.body[0])


# ── Wire decoding helpers ─────────────────────────────────────────

def _int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidGameState(f"{field} must be an integer, got {value!r}")
    return value


def _cell(data: dict) -> Cell:
    return (_int(data["x"], "x"), _int(data["y"], "y"))


def _snake(data: dict) -> Snake:
    body = tuple(_cell(seg) for seg in data["body"])
    if not body:
        raise InvalidGameState(f"snake {data.get('id')!r} has an empty body")
    health = _int(data["health"], "health")
    return Snake(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        health=max(0, min(MAX_HEALTH, health)),
        body=body,
    )


def _snake_dict(snake: Snake) -> dict:
    return {
        "id": snake.id,
        "name": snake.name,
        "health": snake.health,
        "body": [{"x": x, "y": y} for x, y in snake.body],
    }
