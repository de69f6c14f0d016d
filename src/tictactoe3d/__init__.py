"""tictactoe3d package.

Game engine for tic-tac-toe on a 3x3x3 cube: grid, line catalog, win/draw
evaluation, move engine, computer opponent, and session persistence.

Convenience imports are exposed for common workflows.
"""

from .engine import GameEngine, GameEvent, GameMode, GameStatus, Move, SessionState
from .errors import IllegalMove, IllegalState, SearchCancelled
from .evaluator import evaluate
from .game_basics import BOARD_SIZE, Grid, Outcome, Player
from .lines import line_catalog
from .opponent import ComputerOpponent, OpponentConfig
from .persistence import deserialize, serialize

__all__ = [
    "BOARD_SIZE",
    "Grid",
    "Player",
    "Outcome",
    "line_catalog",
    "evaluate",
    "GameEngine",
    "GameEvent",
    "GameMode",
    "GameStatus",
    "Move",
    "SessionState",
    "ComputerOpponent",
    "OpponentConfig",
    "serialize",
    "deserialize",
    "IllegalMove",
    "IllegalState",
    "SearchCancelled",
]
