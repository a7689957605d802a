"""Durable local store: the single source of truth for the UI.

SQLite calls run in a worker thread behind one lock, so every public
coroutine suspends the caller without blocking the event loop, and a
read never interleaves with a write transaction.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from pyamiibo.exceptions import AmiiboStorageError
from pyamiibo.models.detail import CompatibleGame, Detail
from pyamiibo.models.item import Item
from pyamiibo.store._db import MEMORY_DB, connect, initialize_schema, transaction
from pyamiibo.store.live import Emission, LiveQuery, Subscription

_logger = logging.getLogger(__name__)

R = TypeVar("R")

_GAMES_ADAPTER = TypeAdapter(list[CompatibleGame])

_SELECT_ITEMS = "SELECT id, name, series, image_url FROM items ORDER BY name ASC, id ASC"
_COUNT_ITEMS = "SELECT COUNT(*) FROM items"


def _row_to_item(row: sqlite3.Row) -> Item:
    return Item(id=row["id"], name=row["name"], series=row["series"], image_url=row["image_url"])


def _decode_games(raw: str) -> list[CompatibleGame]:
    try:
        return _GAMES_ADAPTER.validate_json(raw)
    except ValidationError:
        _logger.warning("Discarding undecodable compatible_games column")
        return []


def _log_abandoned_failure(task: asyncio.Future[None]) -> None:
    # Retrieve the outcome so a write whose caller went away is not reported as lost.
    if not task.cancelled() and task.exception() is not None:
        _logger.debug("replace_all finished with %r", task.exception())


def _row_to_detail(row: sqlite3.Row) -> Detail:
    return Detail(
        id=row["id"],
        name=row["name"],
        character=row["character"],
        series=row["series"],
        sub_series=row["sub_series"],
        kind=row["kind"],
        image_url=row["image_url"],
        release_na=row["release_na"],
        release_eu=row["release_eu"],
        release_jp=row["release_jp"],
        release_au=row["release_au"],
        compatible_games=_decode_games(row["compatible_games_json"]),
    )


class LocalStore:
    """Item and Detail tables with atomic replace and live queries.

    Usage::

        store = LocalStore.open("catalogue.sqlite")
        async with store.get_all() as items:
            async for snapshot in items:
                ...
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()
        self._items_version = 0
        self._closed = False
        self._items_query: LiveQuery[list[Item]] = LiveQuery("items", self._read_items)
        self._count_query: LiveQuery[int] = LiveQuery("items.count", self._read_count)

    @classmethod
    def open(cls, db_path: Path | str = MEMORY_DB) -> LocalStore:
        """Open (creating if needed) a store at *db_path*."""
        try:
            conn = connect(db_path)
            initialize_schema(conn)
        except sqlite3.Error as exc:
            raise AmiiboStorageError(f"Cannot open store at {db_path}: {exc}", operation="open") from exc
        return cls(conn)

    @property
    def items_version(self) -> int:
        """Number of committed writes to the Item table since opening."""
        return self._items_version

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_locked(self, operation: str, fn: Callable[[sqlite3.Connection], R]) -> R:
        with self._lock:
            if self._closed:
                raise AmiiboStorageError("Store is closed", operation=operation)
            try:
                return fn(self._conn)
            except sqlite3.Error as exc:
                raise AmiiboStorageError(f"{operation} failed: {exc}", operation=operation) from exc

    async def _call(self, operation: str, fn: Callable[[sqlite3.Connection], R]) -> R:
        return await asyncio.to_thread(self._run_locked, operation, fn)

    async def _read_items(self) -> Emission[list[Item]]:
        def _read(conn: sqlite3.Connection) -> Emission[list[Item]]:
            rows = conn.execute(_SELECT_ITEMS).fetchall()
            return Emission(self._items_version, [_row_to_item(row) for row in rows])

        return await self._call("get_all", _read)

    async def _read_count(self) -> Emission[int]:
        def _read(conn: sqlite3.Connection) -> Emission[int]:
            row = conn.execute(_COUNT_ITEMS).fetchone()
            return Emission(self._items_version, int(row[0]))

        return await self._call("count", _read)

    def _publish_items(self, items: Emission[list[Item]] | None, count: Emission[int] | None) -> None:
        if items is not None:
            self._items_query.publish(items)
        if count is not None:
            self._count_query.publish(count)

    # ------------------------------------------------------------------
    # Item table
    # ------------------------------------------------------------------

    async def replace_all(self, items: Sequence[Item]) -> None:
        """Atomically replace every Item row with *items*.

        All-or-nothing: on failure the table keeps its previous content,
        no live query emits, and :class:`AmiiboStorageError` is raised.
        Duplicate ids within *items* are a failure.
        """
        rows = [(item.id, item.name, item.series, item.image_url) for item in items]

        def _replace(conn: sqlite3.Connection) -> tuple[Emission[list[Item]] | None, Emission[int] | None]:
            with transaction(conn):
                conn.execute("DELETE FROM items")
                conn.executemany(
                    "INSERT INTO items (id, name, series, image_url) VALUES (?, ?, ?, ?)",
                    rows,
                )
            self._items_version += 1
            version = self._items_version
            # Snapshot inside the lock: emissions reflect exactly this commit.
            # Subscribers registered later read after this commit on their own.
            snapshot = None
            if self._items_query.subscriber_count > 0:
                snapshot = Emission(version, [_row_to_item(row) for row in conn.execute(_SELECT_ITEMS)])
            count = Emission(version, len(rows)) if self._count_query.subscriber_count > 0 else None
            return snapshot, count

        async def _commit_and_publish() -> None:
            snapshot, count = await self._call("replace_all", _replace)
            _logger.debug("Replaced item table with %d rows (version %d)", len(rows), self._items_version)
            self._publish_items(snapshot, count)

        # Publication follows the commit even when the caller is cancelled.
        task = asyncio.ensure_future(_commit_and_publish())
        task.add_done_callback(_log_abandoned_failure)
        await asyncio.shield(task)

    def get_all(self) -> Subscription[list[Item]]:
        """Live query of all items ordered by name."""
        return self._items_query.subscribe()

    def count(self) -> Subscription[int]:
        """Live query of the item row count."""
        return self._count_query.subscribe()

    # ------------------------------------------------------------------
    # Detail table
    # ------------------------------------------------------------------

    async def get_detail(self, key: str) -> Detail | None:
        """Point lookup of a cached detail; ``None`` when absent."""

        def _get(conn: sqlite3.Connection) -> sqlite3.Row | None:
            row: sqlite3.Row | None = conn.execute(
                "SELECT * FROM details WHERE lookup_key = ? LIMIT 1",
                (key,),
            ).fetchone()
            return row

        row = await self._call("get_detail", _get)
        if row is None:
            return None
        return _row_to_detail(row)

    async def put_detail(self, detail: Detail, key: str | None = None) -> None:
        """Insert or replace a detail row, keyed by *key* (defaults to ``detail.id``)."""
        lookup_key = key if key is not None else detail.id
        games_json = json.dumps([game.model_dump() for game in detail.compatible_games])
        params: tuple[Any, ...] = (
            lookup_key,
            detail.id,
            detail.name,
            detail.character,
            detail.series,
            detail.sub_series,
            detail.kind,
            detail.image_url,
            detail.release_na,
            detail.release_eu,
            detail.release_jp,
            detail.release_au,
            games_json,
        )

        def _put(conn: sqlite3.Connection) -> None:
            with transaction(conn):
                conn.execute(
                    """
                    INSERT OR REPLACE INTO details (
                        lookup_key, id, name, character, series, sub_series, kind, image_url,
                        release_na, release_eu, release_jp, release_au, compatible_games_json
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    params,
                )

        await self._call("put_detail", _put)
        _logger.debug("Cached detail for %r", lookup_key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """End every open subscription and release the connection."""
        self._items_query.close_all()
        self._count_query.close_all()
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()
