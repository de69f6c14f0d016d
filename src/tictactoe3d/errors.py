"""Error taxonomy for the game engine.

- IllegalMove: rejected action, Session State unchanged.
- IllegalState: persisted record failed validation; discard it.
- SearchCancelled: the opponent search was abandoned by its caller.
"""
from __future__ import annotations


class GameError(Exception):
    pass


class IllegalMove(GameError, ValueError):
    pass


class IllegalState(GameError, ValueError):
    pass


class SearchCancelled(GameError):
    pass
