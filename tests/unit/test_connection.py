"""Tests for database opening, transactions and storage error translation."""

import sqlite3
from pathlib import Path

import pytest

from lychee_notes.core.database.connection import (
    MEMORY_DB,
    open_database,
    storage_errors,
    transaction,
)
from lychee_notes.errors import StorageIOError, TreeStoreError, ValidationError
from lychee_notes.store import TreeStore


def _count(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]


def _insert(conn: sqlite3.Connection, doc_id: str) -> None:
    conn.execute(
        "INSERT INTO documents (id, title, content, createdAt, updatedAt) "
        "VALUES (?, '', '', 't', 't')",
        (doc_id,),
    )


def test_open_database_creates_parent_directory_and_uses_wal(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "notes.sqlite3"
    conn = open_database(db_path)
    try:
        assert db_path.exists()
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"
        assert conn.isolation_level is None
    finally:
        conn.close()


def test_transaction_commits(conn: sqlite3.Connection) -> None:
    with transaction(conn):
        _insert(conn, "a")
    assert _count(conn) == 1
    assert not conn.in_transaction


def test_transaction_rolls_back_on_sqlite_error(conn: sqlite3.Connection) -> None:
    with pytest.raises(StorageIOError) as excinfo:
        with transaction(conn):
            _insert(conn, "a")
            _insert(conn, "a")
    assert _count(conn) == 0
    assert not conn.in_transaction
    assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)
    assert excinfo.value.sqlite_errorcode is not None
    assert "UNIQUE" in str(excinfo.value)


def test_transaction_rolls_back_on_domain_error(conn: sqlite3.Connection) -> None:
    with pytest.raises(ValidationError):
        with transaction(conn):
            _insert(conn, "a")
            raise ValidationError("stop")
    assert _count(conn) == 0


def test_storage_errors_translates_sqlite_errors(conn: sqlite3.Connection) -> None:
    with pytest.raises(StorageIOError) as excinfo:
        with storage_errors():
            conn.execute("SELECT * FROM no_such_table")
    assert "no_such_table" in str(excinfo.value)
    assert excinfo.value.kind == "StorageIOError"


def test_store_on_closed_connection_raises_storage_error(
    store: TreeStore, conn: sqlite3.Connection
) -> None:
    conn.close()
    with pytest.raises(StorageIOError):
        store.get("anything")
    with pytest.raises(TreeStoreError):
        store.create(title="x")


def test_store_open_and_close_file_database(tmp_path: Path) -> None:
    db_path = tmp_path / "notes.sqlite3"
    with TreeStore.open(db_path) as store:
        doc = store.create(title="persisted")
    with TreeStore.open(db_path) as store:
        fetched = store.get(doc.id)
    assert fetched is not None
    assert fetched.title == "persisted"


def test_memory_database_constant() -> None:
    conn = open_database(MEMORY_DB)
    assert conn.execute("SELECT 1").fetchone() == (1,)
    conn.close()
