from snakebrain.models import Board, GameState, Snake


def make_snake(snake_id, body, health=90):
    return Snake(id=snake_id, name=snake_id, health=health, body=tuple(body))


def make_state(snakes, food=(), width=11, height=11, turn=10, you="you"):
    board = Board(width=width, height=height, food=frozenset(food), snakes=tuple(snakes))
    return GameState(game_id="test", turn=turn, board=board, you_id=you)


def wire_snake(snake_id, body, health=90):
    return {
        "id": snake_id,
        "name": snake_id,
        "health": health,
        "body": [{"x": x, "y": y} for x, y in body],
    }
