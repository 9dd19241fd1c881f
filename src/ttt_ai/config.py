"""Runtime settings: repository/data locations and the AI's thinking delay.

Environment-first, with fallbacks that still work when installed as a
package or executed from arbitrary CWDs. CLI flags override these.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

DEFAULT_THINK_DELAY = 0.6


def _find_git_root(start: Path, max_levels: int = 5) -> Path | None:
    """Nearest of `start` and its first few parents holding a .git entry."""
    candidates = [start, *start.parents][:max_levels]
    return next((p for p in candidates if (p / ".git").exists()), None)


def repo_root() -> Path:
    """Order: env var TTT_AI_REPO_ROOT -> nearest parent containing .git -> CWD."""
    env = os.getenv("TTT_AI_REPO_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    if git_root is not None:
        return git_root
    return Path.cwd()


def data_dir() -> Path:
    p = os.getenv("TTT_AI_DATA_DIR")
    return Path(p) if p else repo_root() / "data"


def think_delay() -> float:
    """Seconds the terminal game waits before the AI replies."""
    raw = os.getenv("TTT_AI_THINK_DELAY")
    if raw is None or not raw.strip():
        return DEFAULT_THINK_DELAY
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"TTT_AI_THINK_DELAY must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"TTT_AI_THINK_DELAY must be >= 0, got {value}")
    return value


def get_git_commit() -> str | None:
    """Current commit hash, or None outside a git checkout."""
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_root()), "rev-parse", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.strip() or None
