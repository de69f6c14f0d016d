"""
Win/draw evaluation against the line catalog.

`evaluate` is the only place a winner is decided. The opponent's search
calls `completed_line_mark` too, so rules and search can never disagree.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from .game_basics import EMPTY, Grid, Outcome
from .lines import Line, flat_lines, line_catalog


def completed_line_mark(cells: Sequence[int], lines: Iterable[Tuple[int, ...]]) -> int:
    """Mark owning the first fully occupied line among `lines`, else 0."""
    for line in lines:
        v = cells[line[0]]
        if v != EMPTY and all(cells[i] == v for i in line[1:]):
            return v
    return EMPTY


def evaluate(grid: Grid) -> Optional[Outcome]:
    cells = grid.flat()
    mark = completed_line_mark(cells, flat_lines(grid.size))
    if mark != EMPTY:
        return Outcome.for_player(mark)
    if EMPTY not in cells:
        return Outcome.DRAW
    return None


def winning_line(grid: Grid) -> Optional[Line]:
    cells = grid.flat()
    for line, flat in zip(line_catalog(grid.size), flat_lines(grid.size)):
        if completed_line_mark(cells, (flat,)) != EMPTY:
            return line
    return None
