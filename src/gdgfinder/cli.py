"""
GDG Finder CLI entrypoint.

This CLI is intended for quick local demos and debugging. It wires a directory source
(HTTP or a local file) into `gdgfinder.search.repository.ChapterRepository` and prints
what a UI would show.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from gdgfinder.config.settings import Settings, get_settings
from gdgfinder.core.geo import GeoPoint
from gdgfinder.core.logging import configure_logging
from gdgfinder.directory.client import DirectoryClient
from gdgfinder.directory.loader import FileDirectorySource
from gdgfinder.search.errors import FetchError
from gdgfinder.search.repository import ChapterRepository, FetchAll


def _fetcher(args: argparse.Namespace, settings: Settings) -> FetchAll:
    if args.file:
        return FileDirectorySource(args.file).fetch_all
    return DirectoryClient(settings).fetch_all


def _reference_point(args: argparse.Namespace) -> GeoPoint | None:
    if args.lat is None and args.lon is None:
        return None
    if args.lat is None or args.lon is None:
        raise ValueError("--lat and --lon must be given together")
    return GeoPoint(lat=float(args.lat), lon=float(args.lon))


async def _open_repository(args: argparse.Namespace) -> ChapterRepository:
    point = _reference_point(args)
    settings = get_settings()
    repo = ChapterRepository(_fetcher(args, settings), settings)
    if point is not None:
        repo.on_reference_point_changed(point)
    return repo


async def _chapters(args: argparse.Namespace) -> int:
    async with await _open_repository(args) as repo:
        chapters = await repo.get_filtered(args.region)

    if args.json:
        print(json.dumps([c.model_dump(mode="json") for c in chapters], ensure_ascii=False, indent=2))
        return 0

    for i, chapter in enumerate(chapters, start=1):
        where = ", ".join(p for p in (chapter.city, chapter.country) if p)
        print(f"{i:>3}. {chapter.name} [{chapter.region}] {where}")
    return 0


async def _regions(args: argparse.Namespace) -> int:
    async with await _open_repository(args) as repo:
        filters = await repo.get_filters()

    if args.json:
        print(json.dumps(list(filters), ensure_ascii=False))
        return 0

    for region in filters:
        print(region)
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lat", type=float, default=None, help="Reference latitude (omit for directory order)")
    p.add_argument("--lon", type=float, default=None, help="Reference longitude")
    p.add_argument("--file", type=str, default=None, help="Read the directory from a local JSON file")
    p.add_argument("--json", action="store_true", help="Output machine-readable JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GDG Finder CLI."""
    parser = argparse.ArgumentParser(prog="gdgfinder")
    sub = parser.add_subparsers(dest="command", required=True)

    ch = sub.add_parser("chapters", help="List chapters, nearest first when a location is given.")
    _add_common(ch)
    ch.add_argument("--region", type=str, default=None, help="Only chapters in this region")
    ch.set_defaults(func=_chapters)

    rg = sub.add_parser("regions", help="List regions, ordered by their nearest chapter.")
    _add_common(rg)
    rg.set_defaults(func=_regions)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m gdgfinder.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(asyncio.run(func(args)))
    except ValueError as exc:
        parser.error(str(exc))
    except FetchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
