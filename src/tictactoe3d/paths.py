"""Centralized path helpers for saved sessions and exported records.

Environment-first, with fallbacks that still work when installed as a
package or executed from arbitrary CWDs.
"""

from __future__ import annotations

import os
from pathlib import Path


def _find_git_root(start: Path) -> Path | None:
    cur = start
    for _ in range(5):
        if (cur / ".git").exists():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent
    return None


def home_dir() -> Path:
    """Best-effort base directory.

    Order: env var TTT3D_HOME -> nearest parent containing .git -> CWD.
    Avoids writing under site-packages when installed as a library.
    """
    env = os.getenv("TTT3D_HOME")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    if git_root is not None:
        return git_root
    return Path.cwd()


def data_dir() -> Path:
    return home_dir() / "data"


def save_file() -> Path:
    p = os.getenv("TTT3D_SAVE_FILE")
    return Path(p) if p else data_dir() / "session.json"


def exports_dir() -> Path:
    return data_dir() / "exports"
