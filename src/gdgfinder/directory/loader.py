"""
Local directory loader.

Reads a directory document saved to disk (same JSON shape as the public endpoint) and
validates it into typed Pydantic models. Useful for demos and tests without network access.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from gdgfinder.core.env import resolve_project_path
from gdgfinder.domain.models import Chapter, DirectoryResponse
from gdgfinder.search.errors import FetchError


_CHAPTERS_ADAPTER = TypeAdapter(list[Chapter])


def load_directory(path: str | Path) -> DirectoryResponse:
    """Load a directory JSON file.

    Accepts either the full document (`{"filters_": ..., "data": [...]}`) or a bare
    list of chapters.
    """
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return DirectoryResponse(chapters=_CHAPTERS_ADAPTER.validate_python(payload))
    return DirectoryResponse.model_validate(payload)


class FileDirectorySource:
    """Adapts `load_directory` to the repository's async `fetch_all` contract."""

    def __init__(self, path: str | Path):
        self._path = path

    async def fetch_all(self) -> list[Chapter]:
        try:
            return load_directory(self._path).chapters
        except (OSError, ValueError, ValidationError) as exc:
            raise FetchError(f"Could not load directory file {self._path}: {exc}") from exc
