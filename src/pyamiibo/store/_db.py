"""SQLite connection and schema helpers."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

MEMORY_DB = ":memory:"


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Open a connection usable from worker threads.

    Callers must serialize access; the store does so with a lock.
    Transactions are explicit (``isolation_level=None``), see
    :func:`transaction`.
    """
    if str(db_path) == MEMORY_DB:
        target: Path | str = MEMORY_DB
    else:
        target = Path(db_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(target, check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode = WAL")
    except sqlite3.OperationalError:
        conn.execute("PRAGMA journal_mode = DELETE")
    conn.execute("PRAGMA synchronous = NORMAL")
    return conn


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS items (
            id TEXT PRIMARY KEY NOT NULL,
            name TEXT NOT NULL,
            series TEXT NOT NULL,
            image_url TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_items_name ON items(name);

        CREATE TABLE IF NOT EXISTS details (
            lookup_key TEXT PRIMARY KEY NOT NULL,
            id TEXT NOT NULL,
            name TEXT NOT NULL,
            character TEXT NOT NULL,
            series TEXT NOT NULL,
            sub_series TEXT NOT NULL,
            kind TEXT NOT NULL,
            image_url TEXT NOT NULL,
            release_na TEXT,
            release_eu TEXT,
            release_jp TEXT,
            release_au TEXT,
            compatible_games_json TEXT NOT NULL
        );
        """
    )


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block in one write transaction; roll back on any error.

    A failed ``COMMIT`` rolls back too, so the connection never stays
    inside a half-finished transaction.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
