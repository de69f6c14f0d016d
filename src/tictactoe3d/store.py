"""
Storage collaborator for serialized sessions.

The engine never does I/O. A host loads a record at session start, saves it
at whatever boundary it likes, and discards records that fail validation.
Hosts may store extra top-level keys next to the session record (the CLI
keeps `computer_mark` there); `deserialize` ignores them.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .engine import GameEngine, GameMode
from .errors import IllegalState
from .game_basics import Player
from .opponent import ComputerOpponent
from .persistence import deserialize, serialize


class SessionStore(Protocol):
    def load(self) -> Optional[Dict[str, Any]]:
        ...

    def save(self, record: Dict[str, Any]) -> None:
        ...


class JsonFileStore:
    """Keeps one session record in a JSON file; a missing file is NotFound."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise IllegalState(f"{self.path} is not valid UTF-8: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise IllegalState(f"{self.path} is not valid JSON: {exc}") from exc

    def save(self, record: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logging.debug("Saved session to %s", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def session_record(engine: GameEngine) -> Dict[str, Any]:
    """The engine's serialized state plus the computer mark it was playing with."""
    record = serialize(engine.state)
    record["computer_mark"] = int(engine.computer_mark)
    return record


def _stored_mark(record: Dict[str, Any]) -> Optional[Player]:
    if not isinstance(record, dict) or "computer_mark" not in record:
        return None
    raw = record["computer_mark"]
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise IllegalState(f"Field 'computer_mark' must be an integer, got {raw!r}")
    try:
        return Player(raw)
    except ValueError:
        raise IllegalState(f"Unknown computer mark {raw!r}") from None


def restore_session(
    store: SessionStore,
    game_mode: GameMode = GameMode.PVP,
    computer_mark: Optional[Player] = None,
    opponent: Optional[ComputerOpponent] = None,
) -> GameEngine:
    """
    Engine for the stored session, or a fresh one if there is none or it is invalid.

    An explicit `computer_mark` wins over the stored one; with neither, the
    computer plays player 2.
    """
    try:
        record = store.load()
        if record is not None:
            state = deserialize(record)
            stored = _stored_mark(record)
            mark = computer_mark or stored or Player.TWO
            if stored is not None and stored != mark:
                logging.warning(
                    "Saved session had the computer on player %d; now playing player %d",
                    stored, mark,
                )
            logging.info("Restored session with %d moves", len(state.move_history))
            return GameEngine.from_state(state, computer_mark=mark, opponent=opponent)
    except IllegalState as exc:
        logging.warning("Discarding saved session: %s", exc)
    return GameEngine(
        game_mode=game_mode,
        computer_mark=computer_mark or Player.TWO,
        opponent=opponent,
    )
