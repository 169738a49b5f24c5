"""Tests for the error taxonomy."""

import sqlite3

import pytest

from lychee_notes.errors import (
    InvalidReparentError,
    NotFoundError,
    StorageIOError,
    TreeStoreError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (NotFoundError("x"), "NotFound"),
        (InvalidReparentError("cycle"), "InvalidReparent"),
        (ValidationError("bad"), "ValidationError"),
        (StorageIOError("disk"), "StorageIOError"),
    ],
)
def test_every_error_has_a_kind(error: TreeStoreError, kind: str) -> None:
    assert isinstance(error, TreeStoreError)
    assert error.kind == kind


def test_not_found_message_and_id() -> None:
    err = NotFoundError("abc", what="Parent document")
    assert str(err) == "Parent document not found: abc"
    assert err.doc_id == "abc"


def test_storage_error_from_sqlite_keeps_code() -> None:
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
    conn.execute("INSERT INTO t VALUES (1)")
    with pytest.raises(sqlite3.IntegrityError) as excinfo:
        conn.execute("INSERT INTO t VALUES (1)")
    err = StorageIOError.from_sqlite(excinfo.value)
    assert str(err) == str(excinfo.value)
    assert err.sqlite_errorcode == excinfo.value.sqlite_errorcode
    assert err.sqlite_errorname == excinfo.value.sqlite_errorname
