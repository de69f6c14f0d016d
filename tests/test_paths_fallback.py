from pathlib import Path

from tictactoe3d.paths import data_dir, exports_dir, home_dir, save_file


def test_home_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("TTT3D_HOME", raising=False)
    monkeypatch.delenv("TTT3D_SAVE_FILE", raising=False)

    # Simulate running in a directory with no .git present
    monkeypatch.chdir(tmp_path)
    import tictactoe3d.paths as P

    monkeypatch.setattr(P, "_find_git_root", lambda start: None)

    assert home_dir() == tmp_path
    assert data_dir() == tmp_path / "data"
    assert save_file() == tmp_path / "data" / "session.json"
    assert exports_dir() == tmp_path / "data" / "exports"


def test_env_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TTT3D_HOME", str(tmp_path / "home"))
    assert data_dir() == tmp_path / "home" / "data"
    monkeypatch.setenv("TTT3D_SAVE_FILE", str(tmp_path / "elsewhere.json"))
    assert save_file() == tmp_path / "elsewhere.json"
