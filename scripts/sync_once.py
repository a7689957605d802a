#!/usr/bin/env python3
"""Refresh the Amiibo catalogue into a local store and print it.

Runs one full refresh through the synchronizer, then prints the stored
items from a live-query snapshot.  Optionally resolves a detail through
the cache-aside path, which is served locally on the second run.

Usage
-----
::

    python scripts/sync_once.py --db ~/.cache/pyamiibo.sqlite
    python scripts/sync_once.py --detail 0000000000000002 --json

Options::

    --db PATH            SQLite file (default: $AMIIBO_DB_PATH or in-memory)
    --detail KEY         Also look up the detail for KEY
    --detail-key id|name What KEY refers to (default: config)
    --max-items N        Items kept from the refresh
    --json               Output as machine-readable JSON
    -v, --verbose        Debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyamiibo import AmiiboApp, AmiiboConfig, AmiiboError  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--db", help="SQLite file path")
    parser.add_argument("--detail", metavar="KEY", help="Look up the detail for KEY")
    parser.add_argument("--detail-key", choices=("id", "name"))
    parser.add_argument("--max-items", type=int)
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.detail_key:
        overrides["detail_key"] = args.detail_key
    if args.max_items:
        overrides["max_items"] = args.max_items
    config = AmiiboConfig.from_env(**overrides)

    async with AmiiboApp(config) as app:
        try:
            await app.synchronizer.refresh_all()
        except AmiiboError as exc:
            print(f"refresh failed: {exc} (showing cached items)", file=sys.stderr)

        async with app.store.get_all() as live:
            items = await anext(live)

        detail = None
        if args.detail:
            try:
                detail = await app.synchronizer.get_detail(args.detail)
            except AmiiboError as exc:
                print(f"detail lookup failed: {exc}", file=sys.stderr)
                return 1

    if args.json:
        out: dict[str, Any] = {"items": [item.model_dump() for item in items]}
        if detail is not None:
            out["detail"] = detail.model_dump()
        print(json.dumps(out, indent=2, ensure_ascii=False))
        return 0

    for item in items:
        print(f"{item.id:<20} {item.name:<30} {item.series}")
    if detail is not None:
        print()
        print(f"{detail.name} ({detail.kind}, {detail.sub_series})")
        for game in detail.compatible_games:
            print(f"  - {game.name} [{game.platform}]")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
