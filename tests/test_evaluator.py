import pytest

from tictactoe3d.evaluator import completed_line_mark, evaluate, winning_line
from tictactoe3d.game_basics import Grid, Outcome, Player
from tictactoe3d.lines import line_catalog


def _grid(cells_one, cells_two, size=3):
    g = Grid(size)
    for p in cells_one:
        g.place(p, Player.ONE)
    for p in cells_two:
        g.place(p, Player.TWO)
    return g


def test_empty_grid_is_in_progress():
    assert evaluate(Grid()) is None
    assert winning_line(Grid()) is None


@pytest.mark.parametrize("line", line_catalog(3))
def test_every_catalog_line_wins_for_either_player(line):
    assert evaluate(_grid(line, [])) is Outcome.PLAYER_ONE
    assert evaluate(_grid([], line)) is Outcome.PLAYER_TWO
    assert set(winning_line(_grid(line, []))) == set(line)


def test_mixed_line_does_not_win():
    g = _grid([(0, 0, 0), (1, 0, 0)], [(2, 0, 0)])
    assert evaluate(g) is None


def test_space_diagonal_win():
    g = _grid([(0, 0, 0), (1, 1, 1), (2, 2, 2)], [(0, 1, 0), (1, 0, 0)])
    assert evaluate(g) is Outcome.PLAYER_ONE


def test_full_grid_without_line_is_draw(draw_moves):
    g = Grid(4)
    for i, p in enumerate(draw_moves):
        g.place(p, Player.ONE if i % 2 == 0 else Player.TWO)
    assert g.is_full()
    assert winning_line(g) is None
    assert evaluate(g) is Outcome.DRAW


def test_completed_line_mark_on_flat_cells():
    cells = [0] * 27
    for i in (0, 13, 26):
        cells[i] = 2
    assert completed_line_mark(cells, [(0, 13, 26)]) == 2
    assert completed_line_mark(cells, [(0, 1, 2)]) == 0
