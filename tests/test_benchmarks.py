import pytest

from tictactoe3d.engine import GameEngine
from tictactoe3d.game_basics import Player
from tictactoe3d.lines import line_catalog
from tictactoe3d.opponent import ComputerOpponent

pytest.importorskip("pytest_benchmark")


def test_benchmark_choose_move_midgame(benchmark):
    grid = GameEngine.replay([(1, 1, 1), (0, 0, 0), (2, 0, 1)]).grid

    def _choose():
        return ComputerOpponent().choose_move(grid, Player.TWO)

    pos = benchmark(_choose)
    assert pos in grid.empty_cells()


def test_benchmark_line_catalog(benchmark):
    def _build():
        line_catalog.cache_clear()
        return line_catalog(3)

    catalog = benchmark(_build)
    assert len(catalog) == 49
