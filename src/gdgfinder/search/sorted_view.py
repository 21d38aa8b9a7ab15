"""
Distance-sorted, region-grouped view over the fetched chapters.

`SortedView.compute` is pure and CPU-bound; the repository runs it on a worker
thread. It never fails on well-formed input. Chapters whose coordinates are NaN
sort after every finite distance; their order among themselves is unspecified.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from gdgfinder.core.geo import GeoPoint, sort_distance_m
from gdgfinder.domain.models import Chapter
from gdgfinder.search.errors import ComputationCancelled


@dataclass(frozen=True)
class SortedView:
    """Immutable snapshot: sorted chapters, region filters and chapters per region."""

    chapters: tuple[Chapter, ...]
    filters: tuple[str, ...]
    by_region: Mapping[str, tuple[Chapter, ...]]

    def __len__(self) -> int:
        return len(self.chapters)

    def chapters_for(self, region: str | None) -> tuple[Chapter, ...]:
        """All chapters when `region` is None, else that region's chapters (or empty)."""
        if region is None:
            return self.chapters
        return self.by_region.get(region, ())

    @classmethod
    def compute(
        cls,
        records: Sequence[Chapter],
        point: GeoPoint | None = None,
        *,
        should_stop: Callable[[], bool] | None = None,
        check_interval: int = 256,
    ) -> "SortedView":
        """Sort `records` by distance from `point` (input order when None) and group by region.

        `should_stop` is polled every `check_interval` records while distances are
        computed; once it returns True, `ComputationCancelled` is raised.
        """
        if point is None:
            chapters = tuple(records)
        else:
            keys: list[float] = []
            for i, chapter in enumerate(records):
                if should_stop is not None and i % check_interval == 0 and should_stop():
                    raise ComputationCancelled("sort superseded by a newer reference point")
                keys.append(sort_distance_m(chapter.geo.lat, chapter.geo.long, point))
            # sorted() is stable, so equal distances keep fetch order.
            order = sorted(range(len(keys)), key=keys.__getitem__)
            chapters = tuple(records[i] for i in order)

        grouped: dict[str, list[Chapter]] = {}
        for chapter in chapters:
            grouped.setdefault(chapter.region, []).append(chapter)

        # dicts keep insertion order, so keys are the regions in first-seen order.
        return cls(
            chapters=chapters,
            filters=tuple(grouped),
            by_region=MappingProxyType({region: tuple(items) for region, items in grouped.items()}),
        )
