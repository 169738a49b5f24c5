"""Error taxonomy for the tree store."""

import sqlite3


class TreeStoreError(Exception):
    """Base class for all tree store failures."""

    kind: str = "TreeStoreError"


class NotFoundError(TreeStoreError):
    """An operation referenced an id with no corresponding row."""

    kind = "NotFound"

    def __init__(self, doc_id: str, *, what: str = "Document") -> None:
        super().__init__(f"{what} not found: {doc_id}")
        self.doc_id = doc_id


class InvalidReparentError(TreeStoreError):
    """A move would make a document its own ancestor or target an unusable parent."""

    kind = "InvalidReparent"


class ValidationError(TreeStoreError):
    """Malformed scalar input, rejected before any write."""

    kind = "ValidationError"


class StorageIOError(TreeStoreError):
    """The SQLite engine failed. Keeps the original message and error code."""

    kind = "StorageIOError"

    def __init__(
        self,
        message: str,
        *,
        sqlite_errorcode: int | None = None,
        sqlite_errorname: str | None = None,
    ) -> None:
        super().__init__(message)
        self.sqlite_errorcode = sqlite_errorcode
        self.sqlite_errorname = sqlite_errorname

    @classmethod
    def from_sqlite(cls, exc: sqlite3.Error) -> "StorageIOError":
        return cls(
            str(exc),
            sqlite_errorcode=getattr(exc, "sqlite_errorcode", None),
            sqlite_errorname=getattr(exc, "sqlite_errorname", None),
        )
