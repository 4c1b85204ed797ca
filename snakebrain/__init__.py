"""
snakebrain - move decision engine for multi-snake grid survival games.

Receives the full board each turn and answers with one of
"up", "down", "left", "right".
"""

from snakebrain.models import Board, GameState, InvalidGameState, Snake
from snakebrain.strategies import POLICIES, decide_move

__all__ = [
    "Board",
    "GameState",
    "InvalidGameState",
    "Snake",
    "POLICIES",
    "decide_move",
]

__version__ = "0.1.0"
