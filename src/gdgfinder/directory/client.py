"""
GDG directory client.

This module is responsible only for:
- fetching the public chapter directory document over HTTP,
- validating it into typed Pydantic models.

It does not cache or retry: the search repository calls `fetch_all()` at most once
per successful fetch and decides what to do with failures.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from gdgfinder.config.settings import Settings
from gdgfinder.core.http import get_json
from gdgfinder.domain.models import Chapter, DirectoryResponse
from gdgfinder.search.errors import FetchError

logger = logging.getLogger(__name__)


class DirectoryClient:
    """Fetches the chapter directory from `settings.directory.url`."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport

    async def fetch_directory(self) -> DirectoryResponse:
        """Fetch and validate the full directory document.

        Raises:
            FetchError: On transport errors, non-2xx responses, invalid JSON or payloads
                that do not match the expected shape.
        """
        url = self._settings.directory.url
        logger.info("Fetching GDG directory from %s", url)
        try:
            payload = await get_json(
                url,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                transport=self._transport,
            )
        except httpx.HTTPError as exc:
            raise FetchError(f"GDG directory request failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"GDG directory returned invalid JSON: {exc}") from exc

        try:
            return DirectoryResponse.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(f"GDG directory payload has an unexpected shape: {exc}") from exc

    async def fetch_all(self) -> list[Chapter]:
        """Return every chapter in directory order."""
        response = await self.fetch_directory()
        if not response.chapters:
            logger.warning("GDG directory returned 0 chapters; continuing with empty list.")
        return response.chapters
