"""
Session serialization and validation.

Records are plain JSON-compatible dicts. `deserialize` trusts nothing: the
move history is replayed through the engine from an empty grid and must
reproduce the stored grid, winner and side to move exactly.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .engine import GameEngine, GameMode, Move, SessionState
from .errors import IllegalMove, IllegalState
from .game_basics import Grid, Outcome, Player

RECORD_VERSION = 1


def _winner_to_json(winner: Optional[Outcome]) -> Any:
    return None if winner is None else winner.value


def serialize_move(move: Move) -> Dict[str, Any]:
    return {"position": list(move.position), "player": int(move.player), "index": move.index}


def serialize(state: SessionState) -> Dict[str, Any]:
    return {
        "version": RECORD_VERSION,
        "size": state.grid.size,
        "grid": state.grid.to_nested(),
        "current_player": int(state.current_player),
        "winner": _winner_to_json(state.winner),
        "game_mode": state.game_mode.value,
        "move_history": [serialize_move(m) for m in state.move_history],
    }


def _require(record: Dict[str, Any], key: str) -> Any:
    try:
        return record[key]
    except KeyError:
        raise IllegalState(f"Record is missing field {key!r}") from None


def _int_field(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise IllegalState(f"Field {name!r} must be an integer, got {value!r}")
    return value


def _parse_winner(value: Any) -> Optional[Outcome]:
    if value is None:
        return None
    if value == Outcome.DRAW.value:
        return Outcome.DRAW
    try:
        return Outcome(_int_field(value, "winner"))
    except ValueError:
        raise IllegalState(f"Unknown winner {value!r}") from None


def _parse_history(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        raise IllegalState("Field 'move_history' must be a list")
    entries = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise IllegalState(f"Move {i} must be an object, got {entry!r}")
        pos = _require(entry, "position")
        if not isinstance(pos, list) or len(pos) != 3:
            raise IllegalState(f"Move {i} position must be [x, y, z], got {pos!r}")
        entries.append({
            "position": tuple(_int_field(c, "position") for c in pos),
            "player": _int_field(_require(entry, "player"), "player"),
            "index": _int_field(_require(entry, "index"), "index"),
        })
    return entries


def deserialize(record: Any) -> SessionState:
    if not isinstance(record, dict):
        raise IllegalState(f"Record must be an object, got {type(record).__name__}")
    version = _require(record, "version")
    if isinstance(version, bool) or version != RECORD_VERSION:
        raise IllegalState(f"Unsupported record version {version!r}")
    size = _int_field(_require(record, "size"), "size")
    if size < 1:
        raise IllegalState(f"Grid size must be positive, got {size}")
    try:
        grid = Grid.from_nested(_require(record, "grid"))
        current_player = Player(_int_field(_require(record, "current_player"), "current_player"))
        game_mode = GameMode(_require(record, "game_mode"))
    except IllegalState:
        raise
    except ValueError as exc:
        raise IllegalState(f"Malformed record: {exc}") from exc
    if grid.size != size:
        raise IllegalState(f"Grid is {grid.size}x{grid.size}x{grid.size}; record says {size}")
    winner = _parse_winner(_require(record, "winner"))
    history = _parse_history(_require(record, "move_history"))

    engine = GameEngine(game_mode=game_mode, size=size)
    for i, entry in enumerate(history):
        if entry["index"] != i:
            raise IllegalState(f"Move {i} has sequence index {entry['index']}")
        if entry["player"] != engine.current_player:
            raise IllegalState(
                f"Move {i} was recorded for player {entry['player']} "
                f"but player {int(engine.current_player)} was to move"
            )
        try:
            engine.apply_move(entry["position"])
        except IllegalMove as exc:
            raise IllegalState(f"Move {i} does not replay: {exc}") from exc

    if engine.grid != grid:
        raise IllegalState("Stored grid does not match the replayed move history")
    if engine.winner != winner:
        raise IllegalState(
            f"Stored winner {_winner_to_json(winner)!r} does not match "
            f"replayed winner {_winner_to_json(engine.winner)!r}"
        )
    if engine.current_player != current_player:
        raise IllegalState("Stored current player does not match the replayed move history")
    return engine.state


def dumps(state: SessionState) -> str:
    return json.dumps(serialize(state))


def loads(text: str) -> SessionState:
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IllegalState(f"Record is not valid JSON: {exc}") from exc
    return deserialize(record)
