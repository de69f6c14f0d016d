from typing import List, Tuple

import pytest
from hypothesis import given, settings, strategies as st

from tictactoe3d.engine import GameEngine
from tictactoe3d.errors import IllegalMove
from tictactoe3d.evaluator import evaluate
from tictactoe3d.game_basics import Grid, Player, all_positions
from tictactoe3d.opponent import ComputerOpponent, OpponentConfig
from tictactoe3d.persistence import deserialize, serialize

ALL = all_positions(3)

# random games: a permutation of the cube, played until it ends or runs out
games = st.permutations(ALL).flatmap(
    lambda order: st.integers(min_value=0, max_value=27).map(lambda k: order[:k])
)


def _play(order: List[Tuple[int, int, int]]) -> GameEngine:
    engine = GameEngine()
    for pos in order:
        if engine.winner is not None:
            break
        engine.apply_move(pos)
    return engine


@given(games)
def test_history_replay_reproduces_grid_and_winner(order):
    engine = _play(order)
    st_ = engine.state
    assert st_.grid.occupied_count() == len(st_.move_history)
    assert [m.index for m in st_.move_history] == list(range(len(st_.move_history)))
    assert len({m.position for m in st_.move_history}) == len(st_.move_history)
    replayed = GameEngine.replay([m.position for m in st_.move_history])
    assert replayed.state == st_
    assert deserialize(serialize(st_)) == st_


@given(games)
def test_grid_is_a_function_of_the_moves(order):
    engine = _play(order)
    grid = Grid()
    for m in engine.move_history:
        grid.place(m.position, m.player)
    assert grid == engine.grid
    assert evaluate(grid) == engine.winner


@given(games, st.sampled_from(ALL))
def test_rejected_moves_change_nothing(order, pos):
    engine = _play(order)
    before = engine.state
    if engine.winner is None and not before.grid.is_occupied(pos):
        return
    with pytest.raises(IllegalMove):
        engine.apply_move(pos)
    assert engine.state == before


@given(games)
def test_completed_line_is_terminal(order):
    engine = _play(order)
    if engine.winner is None:
        return
    last = engine.move_history[-1]
    assert engine.winner.player in (None, last.player)
    for pos in engine.grid.empty_cells():
        with pytest.raises(IllegalMove):
            engine.apply_move(pos)
    engine.reset()
    assert engine.state.move_history == () and engine.winner is None
    assert engine.current_player is Player.ONE


@settings(max_examples=25, deadline=None)
@given(games)
def test_opponent_move_is_legal_and_deterministic(order):
    engine = _play(order)
    if engine.winner is not None:
        return
    cfg = OpponentConfig(max_depth=1, full_depth_empties=4)
    grid = engine.grid
    pos = ComputerOpponent(cfg).choose_move(grid, engine.current_player)
    assert pos in grid.empty_cells()
    assert ComputerOpponent(cfg).choose_move(grid, engine.current_player) == pos
