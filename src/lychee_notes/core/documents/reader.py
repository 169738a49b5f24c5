"""Read model: paginated listings and lookups."""

import sqlite3

from lychee_notes.config import DEFAULT_LIST_LIMIT, DEFAULT_TRASH_LIMIT
from lychee_notes.core.database.connection import storage_errors
from lychee_notes.core.documents.validation import clamp_page
from lychee_notes.core.tree.navigation import (
    DOCUMENT_COLUMNS,
    fetch_document,
    get_breadcrumbs,
    get_children,
    row_to_document,
)
from lychee_notes.models.document import Document


class ReadModel:
    """Queries over the documents table. Never writes."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_trashed(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Document]:
        """Trashed documents, most recently trashed first."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_TRASH_LIMIT)
        with storage_errors():
            rows = self.conn.execute(
                f"SELECT {DOCUMENT_COLUMNS} FROM documents "
                "WHERE deletedAt IS NOT NULL "
                "ORDER BY deletedAt DESC "
                "LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return [row_to_document(r) for r in rows]

    def get(self, doc_id: str) -> Document | None:
        with storage_errors():
            return fetch_document(self.conn, doc_id)

    def children(self, parent_id: str | None) -> list[Document]:
        with storage_errors():
            return list(get_children(self.conn, parent_id=parent_id))

    def breadcrumbs(self, doc_id: str) -> list[Document]:
        with storage_errors():
            return list(get_breadcrumbs(self.conn, doc_id))

    def list(self, *, limit: int | None = None, offset: int | None = None) -> list[Document]:
        """Live documents by sibling position, most recently updated first on ties."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_LIST_LIMIT)
        with storage_errors():
            rows = self.conn.execute(
                f"SELECT {DOCUMENT_COLUMNS} FROM documents "
                "WHERE deletedAt IS NULL "
                "ORDER BY sortOrder ASC, updatedAt DESC "
                "LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return [row_to_document(r) for r in rows]
