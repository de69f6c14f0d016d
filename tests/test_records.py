import csv
import json
from pathlib import Path

import pytest

from tictactoe3d.engine import GameEngine
from tictactoe3d.records import RECORD_FIELDS, ExportArgs, export_game, move_rows


def _fake_missing_parquet(monkeypatch):
    # Simulate missing pandas/pyarrow by making importlib.find_spec return None
    import importlib

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)


def test_move_rows_track_outcome(scenario_moves):
    rows = move_rows(GameEngine.replay(scenario_moves).state)
    assert [r["index"] for r in rows] == [0, 1, 2, 3, 4]
    assert [r["player"] for r in rows] == [1, 2, 1, 2, 1]
    assert rows[-1]["winner_after"] == "1"
    assert all(r["winner_after"] == "" for r in rows[:-1])
    assert rows[2]["cell"] == 9 and (rows[2]["x"], rows[2]["y"], rows[2]["z"]) == (1, 0, 0)
    assert rows[0]["open_cells"] == 26


def test_csv_export_and_manifest(tmp_path: Path, scenario_moves):
    out = export_game(GameEngine.replay(scenario_moves).state, ExportArgs(out=tmp_path / "exp"))
    with (out / "moves.csv").open() as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == RECORD_FIELDS
    assert len(rows) == 5
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["row_counts"] == {"moves": 5}
    assert manifest["winner"] == 1
    assert manifest["parquet_written"] is False
    assert set(manifest["checksums"]) == {"moves_csv"}


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, scenario_moves):
    _fake_missing_parquet(monkeypatch)
    out = export_game(GameEngine.replay(scenario_moves).state, ExportArgs(out=tmp_path / "both", format="both"))
    assert (out / "moves.csv").exists()
    assert not (out / "moves.parquet").exists()
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["parquet_written"] is False


def test_format_parquet_raises_without_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _fake_missing_parquet(monkeypatch)
    out = tmp_path / "exp_parquet"
    with pytest.raises(RuntimeError):
        export_game(GameEngine().state, ExportArgs(out=out, format="parquet"))
    # No partial outputs should exist
    assert not out.exists() or not any(out.iterdir())


def test_parquet_export_when_available(tmp_path: Path, scenario_moves):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    out = export_game(GameEngine.replay(scenario_moves).state, ExportArgs(out=tmp_path / "pq", format="parquet"))
    df = pd.read_parquet(out / "moves.parquet")
    assert list(df.columns) == RECORD_FIELDS
    assert len(df) == 5
    assert not (out / "moves.csv").exists()


def test_unknown_format(tmp_path: Path):
    with pytest.raises(ValueError):
        export_game(GameEngine().state, ExportArgs(out=tmp_path, format="xlsx"))
