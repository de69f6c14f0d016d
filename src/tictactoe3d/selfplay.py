"""
Self-play: the computer opponent playing both sides from a given opening.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .engine import GameEngine, GameMode, SessionState
from .opponent import ComputerOpponent, OpponentConfig


def play_out(
    opening: Iterable[Sequence[int]] = (),
    config: Optional[OpponentConfig] = None,
    max_moves: Optional[int] = None,
) -> SessionState:
    """Replay `opening`, then let the opponent move for whoever is to play."""
    engine = GameEngine.replay(opening, game_mode=GameMode.PVP)
    opponent = ComputerOpponent(config)
    played = 0
    while engine.winner is None and (max_moves is None or played < max_moves):
        pos = opponent.choose_move(engine.grid, engine.current_player)
        engine.apply_move(pos)
        played += 1
    return engine.state
