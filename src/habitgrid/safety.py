"""
Data-path guard for the ``hg`` command line.

The habit file is personal history. A path inside a git checkout risks
committing it; a path that is a directory can never be saved to. The
per-platform storage directory is trusted even when a dotfiles repo tracks
it, since that is where ``hg`` puts the file by default.
"""

from __future__ import annotations

import sys
from pathlib import Path

from .paths import storage_dir


def find_git_root(start: Path) -> Path | None:
    for cur in (start, *start.parents):
        if (cur / ".git").exists():
            return cur
    return None


def _in_storage_dir(data_path: Path) -> bool:
    try:
        data_path.relative_to(storage_dir().resolve())
    except ValueError:
        return False
    return True


def data_path_problems(data_path: Path, allow_repo_data_path: bool) -> list[str]:
    """Return what is wrong with ``data_path`` as a habit file; empty when it is usable."""
    data_path = data_path.resolve()
    problems: list[str] = []

    if data_path.is_dir():
        problems.append(f"{data_path} is a directory, not a habit file")

    if not allow_repo_data_path and not _in_storage_dir(data_path):
        git_root = find_git_root(data_path.parent)
        if git_root is not None:
            problems.append(f"{data_path} is inside the git repo at {git_root}")

    return problems


def assert_safe_data_path(data_path: Path, allow_repo_data_path: bool) -> None:
    """Exit(2) when ``hg`` should not read or write habits at ``data_path``."""
    problems = data_path_problems(data_path, allow_repo_data_path)
    if not problems:
        return
    print("🚫 Refusing to use this habit data path.", file=sys.stderr)
    for problem in problems:
        print(f"   - {problem}", file=sys.stderr)
    print(
        "   Fix: use the default location (see `hg where`), set HABITGRID_DATA, "
        "or pass --allow-repo-data-path for a repo path",
        file=sys.stderr,
    )
    raise SystemExit(2)
