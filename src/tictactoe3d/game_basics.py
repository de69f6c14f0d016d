"""
Game basics: cell values, players, positions and the cubic grid.
Teaching notes:
- The cube is N x N x N with N = BOARD_SIZE; cells are addressed (x, y, z).
- Cell values: 0=empty, 1=player one, 2=player two. Player one always starts.
- Flat indices are x-major: idx = (x * N + y) * N + z. Lines and the search
  work on flat indices; everything user-facing works on triples.
"""
from __future__ import annotations

from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import IllegalMove

BOARD_SIZE = 3
EMPTY = 0

Position = Tuple[int, int, int]


class Player(IntEnum):
    ONE = 1
    TWO = 2

    def opponent(self) -> "Player":
        return Player.TWO if self is Player.ONE else Player.ONE


class Outcome(Enum):
    PLAYER_ONE = 1
    PLAYER_TWO = 2
    DRAW = "draw"

    @classmethod
    def for_player(cls, player: int) -> "Outcome":
        return cls.PLAYER_ONE if player == Player.ONE else cls.PLAYER_TWO

    @property
    def player(self) -> Optional[Player]:
        if self is Outcome.DRAW:
            return None
        return Player(self.value)


def _is_int(v: object) -> bool:
    return isinstance(v, (int, np.integer)) and not isinstance(v, bool)


def normalize_position(pos: Sequence[int], size: int = BOARD_SIZE) -> Position:
    """Return `pos` as a plain (x, y, z) tuple, or raise IllegalMove."""
    try:
        coords = tuple(pos)
    except TypeError:
        raise IllegalMove(f"Position must be a sequence of three integers, got {pos!r}") from None
    if len(coords) != 3 or not all(_is_int(c) for c in coords):
        raise IllegalMove(f"Position must be three integers, got {pos!r}")
    x, y, z = (int(c) for c in coords)
    if not all(0 <= c < size for c in (x, y, z)):
        raise IllegalMove(f"Position {(x, y, z)} is out of bounds for a {size}x{size}x{size} grid")
    return (x, y, z)


def to_index(pos: Position, size: int = BOARD_SIZE) -> int:
    x, y, z = pos
    return (x * size + y) * size + z


def from_index(idx: int, size: int = BOARD_SIZE) -> Position:
    x, rest = divmod(idx, size * size)
    y, z = divmod(rest, size)
    return (x, y, z)


def all_positions(size: int = BOARD_SIZE) -> List[Position]:
    """Every cell of the cube in lexicographic order."""
    return [(x, y, z) for x in range(size) for y in range(size) for z in range(size)]


class Grid:
    """Fixed-size cube of cell values backed by a numpy int8 array."""

    def __init__(self, size: int = BOARD_SIZE, cells: Optional[np.ndarray] = None):
        if size < 1:
            raise ValueError(f"Grid size must be positive, got {size}")
        self.size = size
        if cells is None:
            cells = np.zeros((size, size, size), dtype=np.int8)
        elif cells.shape != (size, size, size):
            raise ValueError(f"Expected cells of shape {(size,) * 3}, got {cells.shape}")
        self._cells = cells

    def cell_at(self, pos: Sequence[int]) -> int:
        x, y, z = normalize_position(pos, self.size)
        return int(self._cells[x, y, z])

    def is_occupied(self, pos: Sequence[int]) -> bool:
        return self.cell_at(pos) != EMPTY

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self._cells))

    def is_full(self) -> bool:
        return self.occupied_count() == self.size ** 3

    def place(self, pos: Sequence[int], mark: int) -> Position:
        if mark not in (Player.ONE, Player.TWO):
            raise IllegalMove(f"Cannot place mark {mark!r}; expected player 1 or 2")
        x, y, z = normalize_position(pos, self.size)
        current = int(self._cells[x, y, z])
        if current != EMPTY:
            raise IllegalMove(f"Cell {(x, y, z)} is already occupied by player {current}")
        self._cells[x, y, z] = int(mark)
        return (x, y, z)

    def empty_cells(self) -> List[Position]:
        return [p for p in all_positions(self.size) if self._cells[p] == EMPTY]

    def flat(self) -> Tuple[int, ...]:
        return tuple(int(v) for v in self._cells.ravel())

    def copy(self) -> "Grid":
        return Grid(self.size, self._cells.copy())

    def to_nested(self) -> List[List[List[int]]]:
        return self._cells.tolist()

    @classmethod
    def from_nested(cls, nested: Iterable) -> "Grid":
        arr = np.asarray(nested, dtype=object)
        if arr.ndim != 3 or len(set(arr.shape)) != 1:
            raise ValueError(f"Grid must be a cube, got shape {arr.shape}")
        values = list(arr.flat)
        # bool is an int subclass; True must not pass for player 1
        if any(isinstance(v, (bool, np.bool_)) or not isinstance(v, (int, np.integer)) for v in values):
            raise ValueError("Grid cells must be integers")
        if not set(values) <= {EMPTY, Player.ONE, Player.TWO}:
            raise ValueError("Grid cells must be 0, 1 or 2")
        return cls(arr.shape[0], arr.astype(np.int8))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f"Grid(size={self.size}, occupied={self.occupied_count()})"

    def render(self) -> str:
        """Text picture of the cube, one z-layer per block."""
        symbols = {EMPTY: ".", Player.ONE: "X", Player.TWO: "O"}
        blocks = []
        for z in range(self.size):
            rows = [f"z={z}"]
            for y in range(self.size):
                rows.append(" ".join(symbols[int(self._cells[x, y, z])] for x in range(self.size)))
            blocks.append("\n".join(rows))
        return "\n\n".join(blocks)
