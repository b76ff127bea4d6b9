from __future__ import annotations

from pathlib import Path


def repo_root() -> Path:
    # backend/careerpath/core/paths.py -> core -> careerpath -> backend -> repo
    return Path(__file__).resolve().parents[3]


def package_root() -> Path:
    return Path(__file__).resolve().parents[1]


def resolve_repo_path(path_value: str) -> Path:
    """
    Resolves a path that may be relative to the repo root.
    - If absolute: returns as-is.
    - Else tries CWD-relative.
    - Else tries repo-root-relative.
    """
    p = Path(path_value)
    if p.is_absolute():
        return p
    if p.exists():
        return p.resolve()

    rr = repo_root() / path_value
    if rr.exists():
        return rr.resolve()

    return p.resolve()
