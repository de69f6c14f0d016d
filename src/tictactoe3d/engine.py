"""
Move engine: the single owner of Session State.

All mutation goes through `apply_move`, `reset` and `set_game_mode`.
Readers get snapshots via `state`; listeners are plain callables invoked
after each committed mutation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import IllegalMove
from .evaluator import evaluate
from .game_basics import BOARD_SIZE, Grid, Outcome, Player, Position
from .opponent import ComputerOpponent


class GameMode(Enum):
    PVP = "pvp"
    PVC = "pvc"


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


class GameEvent(Enum):
    MOVE_APPLIED = "move_applied"
    GAME_OVER = "game_over"
    RESET = "reset"
    MODE_CHANGED = "mode_changed"


@dataclass(frozen=True)
class Move:
    position: Position
    player: Player
    index: int


@dataclass
class SessionState:
    grid: Grid = field(default_factory=Grid)
    current_player: Player = Player.ONE
    winner: Optional[Outcome] = None
    game_mode: GameMode = GameMode.PVP
    move_history: Tuple[Move, ...] = ()

    @property
    def status(self) -> GameStatus:
        if self.winner is None:
            return GameStatus.IN_PROGRESS
        if self.winner is Outcome.DRAW:
            return GameStatus.DRAWN
        return GameStatus.WON

    def copy(self) -> "SessionState":
        return SessionState(
            grid=self.grid.copy(),
            current_player=self.current_player,
            winner=self.winner,
            game_mode=self.game_mode,
            move_history=tuple(self.move_history),
        )


Listener = Callable[[GameEvent, SessionState], None]


class GameEngine:
    """
    Applies moves, advances turns, and decides terminal state.

    The computer only moves when asked (`play_computer_turn`) or as the
    reply inside `submit_move`; `apply_move` never triggers it.
    """

    def __init__(
        self,
        game_mode: GameMode = GameMode.PVP,
        computer_mark: Player = Player.TWO,
        opponent: Optional[ComputerOpponent] = None,
        size: int = BOARD_SIZE,
    ):
        self._state = SessionState(grid=Grid(size), game_mode=GameMode(game_mode))
        self.computer_mark = Player(computer_mark)
        self._opponent = opponent
        self._listeners: List[Listener] = []

    # -- read-only view -------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state.copy()

    @property
    def grid(self) -> Grid:
        return self._state.grid.copy()

    @property
    def current_player(self) -> Player:
        return self._state.current_player

    @property
    def winner(self) -> Optional[Outcome]:
        return self._state.winner

    @property
    def game_mode(self) -> GameMode:
        return self._state.game_mode

    @property
    def move_history(self) -> Tuple[Move, ...]:
        return self._state.move_history

    @property
    def status(self) -> GameStatus:
        return self._state.status

    # -- notifications --------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _notify(self, event: GameEvent) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            listener(event, snapshot)

    # -- mutators -------------------------------------------------------

    def apply_move(self, pos: Sequence[int]) -> Move:
        st = self._state
        if st.winner is not None:
            raise IllegalMove(f"Game is over ({st.winner.name}); reset to play again")
        player = st.current_player
        # Grid.place validates bounds and occupancy before touching the cell
        placed = st.grid.place(pos, player)
        move = Move(position=placed, player=player, index=len(st.move_history))
        st.move_history = st.move_history + (move,)
        st.winner = evaluate(st.grid)
        if st.winner is None:
            st.current_player = player.opponent()
        logging.debug("move %d: player %d -> %s", move.index, player, placed)
        self._notify(GameEvent.MOVE_APPLIED)
        if st.winner is not None:
            logging.info("Game over after %d moves: %s", len(st.move_history), st.winner.name)
            self._notify(GameEvent.GAME_OVER)
        return move

    def reset(self) -> None:
        st = self._state
        self._state = SessionState(grid=Grid(st.grid.size), game_mode=st.game_mode)
        self._notify(GameEvent.RESET)

    def set_game_mode(self, mode: GameMode) -> None:
        mode = GameMode(mode)
        if mode is self._state.game_mode:
            return
        self._state.game_mode = mode
        self._notify(GameEvent.MODE_CHANGED)

    # -- computer opponent ----------------------------------------------

    def is_computer_turn(self) -> bool:
        st = self._state
        return (
            st.game_mode is GameMode.PVC
            and st.winner is None
            and st.current_player == self.computer_mark
        )

    def _get_opponent(self) -> ComputerOpponent:
        if self._opponent is None:
            self._opponent = ComputerOpponent()
        return self._opponent

    def play_computer_turn(self) -> Optional[Move]:
        if not self.is_computer_turn():
            return None
        pos = self._get_opponent().choose_move(self._state.grid.copy(), self.computer_mark)
        return self.apply_move(pos)

    def submit_move(self, pos: Sequence[int]) -> List[Move]:
        """Apply a human move, then the computer's reply if one is due."""
        if self.is_computer_turn():
            raise IllegalMove("It is the computer's turn")
        applied = [self.apply_move(pos)]
        reply = self.play_computer_turn()
        if reply is not None:
            applied.append(reply)
        return applied

    # -- construction helpers -------------------------------------------

    @classmethod
    def replay(
        cls,
        positions: Iterable[Sequence[int]],
        game_mode: GameMode = GameMode.PVP,
        size: int = BOARD_SIZE,
    ) -> "GameEngine":
        engine = cls(game_mode=game_mode, size=size)
        for pos in positions:
            engine.apply_move(pos)
        return engine

    @classmethod
    def from_state(
        cls,
        state: SessionState,
        computer_mark: Player = Player.TWO,
        opponent: Optional[ComputerOpponent] = None,
    ) -> "GameEngine":
        engine = cls(
            game_mode=state.game_mode,
            computer_mark=computer_mark,
            opponent=opponent,
            size=state.grid.size,
        )
        engine._state = state.copy()
        return engine
