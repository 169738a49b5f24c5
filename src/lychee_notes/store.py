"""The tree store: one connection, one clock, four engines."""

import sqlite3
from pathlib import Path
from types import TracebackType

from lychee_notes.core.clock import UtcClock
from lychee_notes.core.database.connection import open_database
from lychee_notes.core.database.schema import migrate_schema
from lychee_notes.core.documents.lifecycle import LifecycleEngine
from lychee_notes.core.documents.mutations import MutationEngine
from lychee_notes.core.documents.reader import ReadModel
from lychee_notes.core.documents.reparent import ReparentEngine
from lychee_notes.models.document import Document, RestoreResult, TrashResult
from lychee_notes.models.patch import DocumentPatch
from lychee_notes.protocols import ClockProtocol


class TreeStore:
    """Facade over the read model and the mutation, lifecycle and reparent engines.

    The connection must already carry the current schema; use :meth:`open` to
    open a file and migrate it in one step.
    """

    def __init__(self, conn: sqlite3.Connection, *, clock: ClockProtocol | None = None) -> None:
        self.conn = conn
        self.clock = clock or UtcClock()
        self.reader = ReadModel(conn)
        self.mutations = MutationEngine(conn, self.clock)
        self.lifecycle = LifecycleEngine(conn, self.clock)
        self.reparent = ReparentEngine(conn, self.clock)

    @classmethod
    def open(cls, path: Path | str, *, clock: ClockProtocol | None = None) -> "TreeStore":
        conn = open_database(path)
        migrate_schema(conn)
        return cls(conn, clock=clock)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "TreeStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --- Read model ---

    def list_trashed(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Document]:
        return self.reader.list_trashed(limit=limit, offset=offset)

    def get(self, doc_id: str) -> Document | None:
        return self.reader.get(doc_id)

    def children(self, parent_id: str | None) -> list[Document]:
        return self.reader.children(parent_id)

    def breadcrumbs(self, doc_id: str) -> list[Document]:
        return self.reader.breadcrumbs(doc_id)

    # --- Mutations ---

    def create(
        self,
        *,
        title: str | None = None,
        content: str | None = None,
        parent_id: str | None = None,
        emoji: str | None = None,
    ) -> Document:
        return self.mutations.create(
            title=title, content=content, parent_id=parent_id, emoji=emoji
        )

    def update(self, doc_id: str, patch: DocumentPatch) -> Document:
        return self.mutations.update(doc_id, patch)

    # --- Lifecycle ---

    def trash(self, doc_id: str) -> TrashResult:
        return self.lifecycle.trash(doc_id)

    def restore(self, doc_id: str) -> RestoreResult:
        return self.lifecycle.restore(doc_id)

    def permanent_delete(self, doc_id: str) -> list[str]:
        return self.lifecycle.permanent_delete(doc_id)

    # --- Reparent ---

    def move(self, doc_id: str, new_parent_id: str | None, new_sort_order: int) -> Document:
        return self.reparent.move(doc_id, new_parent_id, new_sort_order)

    def list(self, *, limit: int | None = None, offset: int | None = None) -> list[Document]:
        return self.reader.list(limit=limit, offset=offset)
