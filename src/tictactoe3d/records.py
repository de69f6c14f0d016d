"""
Game-record export: one row per move, written as CSV and/or Parquet, plus a
manifest with row counts, outcome and checksums.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .engine import GameEngine, SessionState
from .game_basics import to_index

RECORD_FIELDS = ["index", "player", "x", "y", "z", "cell", "open_cells", "winner_after"]
EXPORT_VERSION = "1.0.0"


@dataclass
class ExportArgs:
    out: Path
    format: str = "csv"  # one of: "csv", "parquet", "both"


def move_rows(state: SessionState) -> List[Dict[str, Any]]:
    """Replay the history and describe each move with the outcome it produced."""
    size = state.grid.size
    engine = GameEngine(game_mode=state.game_mode, size=size)
    rows: List[Dict[str, Any]] = []
    for move in state.move_history:
        engine.apply_move(move.position)
        x, y, z = move.position
        rows.append({
            "index": move.index,
            "player": int(move.player),
            "x": x,
            "y": y,
            "z": z,
            "cell": to_index(move.position, size),
            "open_cells": size ** 3 - move.index - 1,
            "winner_after": "" if engine.winner is None else str(engine.winner.value),
        })
    return rows


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def export_game(state: SessionState, args: ExportArgs) -> Path:
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    have_parquet = (importlib.util.find_spec('pandas') is not None
                    and importlib.util.find_spec('pyarrow') is not None)
    msg = (
        "Parquet dependencies not available (install pandas and pyarrow). "
        "Use pip install .[parquet] to enable parquet support."
    )
    if fmt == "parquet" and not have_parquet:
        # nothing is written when only parquet was requested
        raise RuntimeError(msg)

    rows = move_rows(state)
    args.out.mkdir(parents=True, exist_ok=True)
    csv_path = args.out / "moves.csv"
    parquet_path = args.out / "moves.parquet"
    wrote_csv = wrote_parquet = False

    if fmt in {"csv", "both"}:
        with csv_path.open('w', newline='') as f:
            w = csv.DictWriter(f, fieldnames=RECORD_FIELDS)
            w.writeheader()
            for r in rows:
                w.writerow(r)
        wrote_csv = True
        logging.info("Wrote CSV: %s (%d rows)", csv_path, len(rows))

    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd

            pd.DataFrame(rows, columns=RECORD_FIELDS).to_parquet(parquet_path)
            wrote_parquet = True
            logging.info("Wrote Parquet file to %s", parquet_path)
        else:
            logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.", msg)

    files = {
        "moves_csv": csv_path if wrote_csv else None,
        "moves_parquet": parquet_path if wrote_parquet else None,
    }
    manifest = {
        "export_version": EXPORT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "format": fmt,
        "game_mode": state.game_mode.value,
        "winner": None if state.winner is None else state.winner.value,
        "row_counts": {"moves": len(rows)},
        "files": {k: (str(p) if p else None) for k, p in files.items()},
        "checksums": {k: _sha256_file(p) for k, p in files.items() if p is not None},
        "parquet_written": wrote_parquet,
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json to %s", args.out)
    return args.out
