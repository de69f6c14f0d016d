"""
Computer opponent: negamax with alpha-beta pruning on an explicit stack.
Tie-break policy:
- Prefer faster wins and slower losses (terminal scores carry the ply).
- Among equal scores, prefer the lowest (x, y, z) in lexicographic order.
- Bounded searches score leaf positions with a line heuristic; terminal
  scores always dominate heuristic ones.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .errors import IllegalState, SearchCancelled
from .evaluator import completed_line_mark
from .game_basics import EMPTY, Grid, Player, Position, from_index
from .lines import flat_lines, lines_through

WIN_SCORE = 1_000_000
INF = float("inf")


@dataclass
class OpponentConfig:
    max_depth: int = 3
    full_depth_empties: int = 8

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.full_depth_empties < 0:
            raise ValueError(f"full_depth_empties must be >= 0, got {self.full_depth_empties}")

    @classmethod
    def from_env(cls) -> "OpponentConfig":
        kwargs = {}
        for var, name in (("TTT3D_SEARCH_DEPTH", "max_depth"),
                          ("TTT3D_FULL_DEPTH_EMPTIES", "full_depth_empties")):
            raw = os.getenv(var)
            if raw:
                try:
                    kwargs[name] = int(raw)
                except ValueError:
                    raise ValueError(f"{var} must be an integer, got {raw!r}") from None
        return cls(**kwargs)


def heuristic_score(cells: Sequence[int], lines, mark: int) -> int:
    """Open lines for `mark` minus open lines for the opponent, weighted 10**k."""
    score = 0
    for line in lines:
        own = theirs = 0
        for i in line:
            v = cells[i]
            if v == mark:
                own += 1
            elif v != EMPTY:
                theirs += 1
        if theirs == 0 and own:
            score += 10 ** own
        elif own == 0 and theirs:
            score -= 10 ** theirs
    return score


class _Frame:
    __slots__ = ("to_move", "depth", "ply", "alpha", "beta", "moves", "cursor", "best", "value")

    def __init__(self, to_move, depth, ply, alpha, beta):
        self.to_move = to_move
        self.depth = depth
        self.ply = ply
        self.alpha = alpha
        self.beta = beta
        self.moves: List[int] = []
        self.cursor = 0
        self.best = -INF
        self.value: Optional[float] = None


class ComputerOpponent:
    """
    Chooses moves for the side it is asked to play.

    Pure with respect to its inputs: the grid passed in is never modified,
    and identical (grid, mark) pairs always give the identical move.
    """

    def __init__(self, config: Optional[OpponentConfig] = None):
        self.config = config or OpponentConfig()
        self.nodes_evaluated = 0

    def search_depth(self, empties: int) -> int:
        if empties <= self.config.full_depth_empties:
            return empties
        return min(self.config.max_depth, empties)

    def choose_move(
        self,
        grid: Grid,
        mark: Player,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> Position:
        mark = Player(mark)
        size = grid.size
        cells = list(grid.flat())
        if completed_line_mark(cells, flat_lines(size)) != EMPTY:
            raise IllegalState("Cannot choose a move: the game is already won")
        moves = [i for i, v in enumerate(cells) if v == EMPTY]
        if not moves:
            raise IllegalState("Cannot choose a move on a full grid")

        self.nodes_evaluated = 0
        depth = self.search_depth(len(moves))
        best_move = moves[0]
        best_score = -INF
        # flat indices are x-major, so ascending order is lexicographic (x, y, z)
        for idx in moves:
            if cancel is not None and cancel():
                raise SearchCancelled("Opponent search cancelled")
            cells[idx] = mark
            score = -self._negamax(cells, size, mark.opponent(), idx, depth - 1, -INF, -best_score, cancel)
            cells[idx] = EMPTY
            if score > best_score:
                best_score = score
                best_move = idx

        pos = from_index(best_move, size)
        logging.debug(
            "Opponent (player %d) evaluated %d positions at depth %d. Best move: %s (score: %s)",
            mark, self.nodes_evaluated, depth, pos, best_score,
        )
        return pos

    def _open(self, cells, size, to_move, last, depth, ply, alpha, beta) -> _Frame:
        """Create the frame for the node reached by playing `last`."""
        self.nodes_evaluated += 1
        frame = _Frame(to_move, depth, ply, alpha, beta)
        if completed_line_mark(cells, lines_through(size)[last]) != EMPTY:
            # the side that just moved completed a line
            frame.value = -(WIN_SCORE - ply)
        elif EMPTY not in cells:
            frame.value = 0
        elif depth <= 0:
            frame.value = heuristic_score(cells, flat_lines(size), to_move)
        else:
            frame.moves = [i for i, v in enumerate(cells) if v == EMPTY]
        return frame

    def _negamax(self, cells, size, to_move, last, depth, alpha, beta, cancel) -> float:
        stack = [self._open(cells, size, to_move, last, depth, 1, alpha, beta)]
        result: Optional[float] = None
        while stack:
            frame = stack[-1]
            if result is not None:
                score = -result
                result = None
                cells[frame.moves[frame.cursor - 1]] = EMPTY
                if score > frame.best:
                    frame.best = score
                if score > frame.alpha:
                    frame.alpha = score
                if frame.alpha >= frame.beta:
                    frame.cursor = len(frame.moves)
            if frame.value is not None:
                result = frame.value
                stack.pop()
                continue
            if frame.cursor >= len(frame.moves):
                result = frame.best
                stack.pop()
                continue
            if cancel is not None and cancel():
                raise SearchCancelled("Opponent search cancelled")
            move = frame.moves[frame.cursor]
            frame.cursor += 1
            cells[move] = frame.to_move
            stack.append(self._open(
                cells, size, frame.to_move.opponent(), move,
                frame.depth - 1, frame.ply + 1, -frame.beta, -frame.alpha,
            ))
        return result
