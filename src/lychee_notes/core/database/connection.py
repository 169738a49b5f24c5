"""Opening the database and running work inside one transaction."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from lychee_notes.errors import StorageIOError

MEMORY_DB = ":memory:"


def open_database(path: Path | str) -> sqlite3.Connection:
    """Open (creating if needed) a database in autocommit mode.

    Transactions are begun explicitly by :func:`transaction`, never implicitly
    by the sqlite3 module.
    """
    target = str(path)
    try:
        if target != MEMORY_DB:
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(target, isolation_level=None)
        if target != MEMORY_DB:
            conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        raise StorageIOError.from_sqlite(exc) from exc
    logger.debug("Opened database {}", target)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block as one IMMEDIATE transaction.

    Commits when the block finishes, rolls back on any exception. SQLite errors
    are re-raised as StorageIOError with the original code attached.
    """
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as exc:
        raise StorageIOError.from_sqlite(exc) from exc

    try:
        yield conn
        conn.execute("COMMIT")
    except sqlite3.Error as exc:
        _rollback(conn)
        raise StorageIOError.from_sqlite(exc) from exc
    except BaseException:
        _rollback(conn)
        raise


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate sqlite3 errors raised by read-only statements."""
    try:
        yield
    except sqlite3.Error as exc:
        raise StorageIOError.from_sqlite(exc) from exc


def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        conn.execute("ROLLBACK")
