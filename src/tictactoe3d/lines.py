"""
Line catalog: every straight line of N cells through the cube.
Teaching notes:
- Axis lines: 3 orientations x N^2 lines (rows, columns, pillars).
- Face diagonals: 2 per slab x 3 slab orientations x N slabs.
- Space diagonals: 4 corner-to-corner lines through the interior.
- For N >= 2 that is 3N^2 + 6N + 4 lines (49 for the 3x3x3 cube).
The catalog is built once per N, in a fixed order, and never mutated.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Tuple

from .game_basics import BOARD_SIZE, Position, to_index

Line = Tuple[Position, ...]


def _axis_lines(n: int) -> List[Line]:
    lines: List[Line] = []
    for u in range(n):
        for v in range(n):
            lines.append(tuple((i, u, v) for i in range(n)))
            lines.append(tuple((u, i, v) for i in range(n)))
            lines.append(tuple((u, v, i) for i in range(n)))
    return lines


def _face_diagonals(n: int) -> List[Line]:
    lines: List[Line] = []
    hi = n - 1
    for k in range(n):
        # slab x=k
        lines.append(tuple((k, i, i) for i in range(n)))
        lines.append(tuple((k, i, hi - i) for i in range(n)))
        # slab y=k
        lines.append(tuple((i, k, i) for i in range(n)))
        lines.append(tuple((i, k, hi - i) for i in range(n)))
        # slab z=k
        lines.append(tuple((i, i, k) for i in range(n)))
        lines.append(tuple((i, hi - i, k) for i in range(n)))
    return lines


def _space_diagonals(n: int) -> List[Line]:
    hi = n - 1
    return [
        tuple((i, i, i) for i in range(n)),
        tuple((i, i, hi - i) for i in range(n)),
        tuple((i, hi - i, i) for i in range(n)),
        tuple((hi - i, i, i) for i in range(n)),
    ]


@lru_cache(maxsize=None)
def line_catalog(n: int = BOARD_SIZE) -> Tuple[Line, ...]:
    """All winning lines for an n x n x n cube, deduplicated by cell set."""
    if n < 1:
        raise ValueError(f"Board size must be positive, got {n}")
    seen = set()
    catalog: List[Line] = []
    for line in _axis_lines(n) + _face_diagonals(n) + _space_diagonals(n):
        key = frozenset(line)
        if key in seen:
            continue
        seen.add(key)
        catalog.append(line)
    return tuple(catalog)


@lru_cache(maxsize=None)
def flat_lines(n: int = BOARD_SIZE) -> Tuple[Tuple[int, ...], ...]:
    return tuple(tuple(to_index(p, n) for p in line) for line in line_catalog(n))


@lru_cache(maxsize=None)
def lines_through(n: int = BOARD_SIZE) -> Tuple[Tuple[Tuple[int, ...], ...], ...]:
    """For each flat cell index, the flat lines that contain it."""
    by_cell: Dict[int, List[Tuple[int, ...]]] = {i: [] for i in range(n ** 3)}
    for line in flat_lines(n):
        for idx in line:
            by_cell[idx].append(line)
    return tuple(tuple(by_cell[i]) for i in range(n ** 3))


def expected_line_count(n: int) -> int:
    return 3 * n * n + 6 * n + 4
