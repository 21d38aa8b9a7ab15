"""
Project-root helpers.

Settings read an optional `.env` next to `pyproject.toml`, and relative paths given on
the command line or in `GDGFINDER_CONFIG_PATH` resolve against the same root, so the
CLI behaves the same from any working directory inside the checkout.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


@lru_cache
def get_project_root() -> Path:
    """Nearest directory at or above CWD holding `.env` or `pyproject.toml` (else CWD)."""
    cwd = Path.cwd().resolve()
    for candidate in (cwd, *cwd.parents):
        if (candidate / ".env").is_file() or (candidate / "pyproject.toml").is_file():
            return candidate
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `<root>/.env` once; variables already in the environment win."""
    env_path = get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
