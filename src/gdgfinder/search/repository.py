"""
Chapter repository: single-flight, location-aware cache over the chapter directory.

Coordination model:
- All state (`_raw`, `_fetch_task`, `_current`) lives on one asyncio event loop and is
  only touched in synchronous sections between awaits, so no lock is needed. Reference
  points arriving on other threads are handed to that loop with `call_soon_threadsafe`.
- The directory is fetched lazily, once. A successful result is kept for the life of the
  repository; a failure is not stored, so the next query fetches again.
- Each reference-point change starts a new generation: one `SortedView.compute` running
  on a worker thread. The previous generation is cancelled if it has not finished.
- Queries await the current generation through `asyncio.shield`, so a caller giving up
  never cancels work that other callers share.

Cancelled generations are never observed: a query whose generation is superseded before
finishing waits on the newest generation instead. A generation that already finished
keeps serving the queries that were waiting on it.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from gdgfinder.config.settings import Settings, get_settings
from gdgfinder.core.geo import GeoPoint
from gdgfinder.domain.models import Chapter
from gdgfinder.search.errors import FetchError
from gdgfinder.search.sorted_view import SortedView

logger = logging.getLogger(__name__)

FetchAll = Callable[[], Awaitable[Sequence[Chapter]]]


@dataclass(frozen=True)
class _Generation:
    number: int
    task: asyncio.Task
    stop: threading.Event


class ChapterRepository:
    """Serves chapters sorted by distance from the latest reference point."""

    def __init__(
        self,
        fetch_all: FetchAll,
        settings: Settings | None = None,
        *,
        executor: Executor | None = None,
    ):
        self._settings = settings or get_settings()
        self._fetch_all = fetch_all
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._settings.search.max_workers,
            thread_name_prefix="gdgfinder-sort",
        )
        self._loop: asyncio.AbstractEventLoop | None = None
        self._raw: tuple[Chapter, ...] | None = None
        self._fetch_task: asyncio.Task | None = None
        self._current: _Generation | None = None
        self._point: GeoPoint | None = None
        self._generation = 0
        self._initialized = False
        self._closed = False

    @property
    def is_initialized(self) -> bool:
        """True once a reference point has been received (never resets)."""
        return self._initialized

    @property
    def generation(self) -> int:
        """Number of sort generations started so far."""
        return self._generation

    async def get_filtered(self, filter_key: str | None = None) -> tuple[Chapter, ...]:
        """Chapters for `filter_key` (all chapters when None, empty for unknown regions)."""
        view = await self._sorted_view()
        return view.chapters_for(filter_key)

    async def get_filters(self) -> tuple[str, ...]:
        """Regions in order of their nearest chapter."""
        view = await self._sorted_view()
        return view.filters

    def on_reference_point_changed(self, point: GeoPoint) -> None:
        """Start sorting for `point`, cancelling any sort still running for an older one.

        Returns as soon as the new generation is scheduled. Calls from threads other
        than the repository's event loop (e.g. a location callback thread) are handed
        over to that loop; the first call must come from a running loop unless a query
        has already bound one.
        """
        self._ensure_open()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if self._loop is None:
            if running is None:
                raise RuntimeError("ChapterRepository has no event loop yet; call it from a running loop")
            self._loop = running
        if running is not self._loop:
            self._loop.call_soon_threadsafe(self._apply_reference_point, point)
            return
        self._apply_reference_point(point)

    async def close(self) -> None:
        """Cancel pending work, wait for it to unwind and release the worker pool."""
        if self._closed:
            return
        self._closed = True
        pending = []
        current = self._current
        if current is not None and not current.task.done():
            current.stop.set()
            current.task.cancel()
            pending.append(current.task)
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
            pending.append(self._fetch_task)
        # Outcomes were already delivered to (or abandoned by) the waiters.
        await asyncio.gather(*pending, return_exceptions=True)
        if self._owns_executor:
            # Running sorts see the stop signal at their next check.
            await asyncio.to_thread(self._executor.shutdown, wait=True, cancel_futures=True)

    async def __aenter__(self) -> "ChapterRepository":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ChapterRepository is closed")

    def _apply_reference_point(self, point: GeoPoint) -> None:
        if self._closed:
            logger.debug("Ignoring reference point %s; repository is closed", point)
            return
        self._initialized = True
        self._point = point
        previous = self._current
        if previous is not None and not previous.task.done():
            logger.debug("Cancelling sort generation %d", previous.number)
            previous.stop.set()
            previous.task.cancel()
        self._start(point)

    async def _sorted_view(self) -> SortedView:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        while True:
            self._ensure_open()
            gen = self._current or self._start(self._point)
            try:
                return await asyncio.shield(gen.task)
            except asyncio.CancelledError:
                if self._superseded(gen):
                    logger.debug("Sort generation %d superseded; waiting on the newest", gen.number)
                    continue
                raise

    def _superseded(self, gen: _Generation) -> bool:
        """True when `gen` was replaced by a newer generation and the caller itself
        has not been asked to cancel."""
        if not gen.task.cancelled() or self._current is gen or self._closed:
            return False
        return asyncio.current_task().cancelling() == 0

    def _start(self, point: GeoPoint | None) -> _Generation:
        stop = threading.Event()
        task = self._loop.create_task(
            self._compute(point, stop), name=f"gdgfinder-sort-{self._generation + 1}"
        )
        self._generation += 1
        gen = _Generation(number=self._generation, task=task, stop=stop)
        task.add_done_callback(functools.partial(self._on_generation_done, gen))
        self._current = gen
        logger.debug("Started sort generation %d (point=%s)", gen.number, point)
        return gen

    def _on_generation_done(self, gen: _Generation, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        if task.exception() is not None and self._current is gen:
            # Drop the failed handle so the next query starts over (and refetches).
            self._current = None

    async def _compute(self, point: GeoPoint | None, stop: threading.Event) -> SortedView:
        records = await self._snapshot()
        compute = functools.partial(
            SortedView.compute,
            records,
            point,
            should_stop=stop.is_set,
            check_interval=self._settings.search.cancel_check_interval,
        )
        try:
            return await asyncio.get_running_loop().run_in_executor(self._executor, compute)
        except asyncio.CancelledError:
            stop.set()
            raise

    async def _snapshot(self) -> tuple[Chapter, ...]:
        if self._raw is not None:
            return self._raw
        if self._fetch_task is None:
            self._fetch_task = asyncio.get_running_loop().create_task(
                self._fetch(), name="gdgfinder-fetch"
            )
            self._fetch_task.add_done_callback(self._on_fetch_done)
        # Shielded: cancelling one generation must not abort the shared fetch.
        return await asyncio.shield(self._fetch_task)

    def _on_fetch_done(self, task: asyncio.Task) -> None:
        if self._fetch_task is not task:
            return
        if task.cancelled() or task.exception() is not None:
            self._fetch_task = None

    async def _fetch(self) -> tuple[Chapter, ...]:
        logger.info("Fetching chapter directory")
        try:
            records = tuple(await self._fetch_all())
        except FetchError as exc:
            logger.warning("Chapter directory fetch failed: %s", exc)
            raise
        except Exception as exc:
            logger.warning("Chapter directory fetch failed: %s", exc)
            raise FetchError(f"Chapter directory fetch failed: {exc}") from exc
        self._raw = records
        logger.info("Fetched %d chapters", len(records))
        return records
