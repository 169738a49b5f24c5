"""Lifecycle cascade engine: trash, restore and permanent deletion of subtrees.

Per document the states are Live -> Trashed -> Live, and either of those ->
Destroyed. Each operation works on a whole subtree inside one transaction.

A trash stamps the document and every descendant that is still live with one
tombstone value. Descendants that were already trashed keep their older
tombstone, which is how restore later tells "what this trash cascaded" apart
from subtrees that were trashed independently before.
"""

import sqlite3
from dataclasses import replace

from loguru import logger

from lychee_notes.core.database.connection import storage_errors, transaction
from lychee_notes.core.tree.navigation import (
    fetch_document,
    get_descendant_ids,
    get_descendants,
    get_restore_chain_ids,
)
from lychee_notes.core.tree.ordering import (
    close_gap,
    live_sibling_count,
    open_gap,
    renumber_children,
)
from lychee_notes.errors import NotFoundError
from lychee_notes.models.document import Document, RestoreResult, TrashResult
from lychee_notes.protocols import ClockProtocol


class LifecycleEngine:
    """Moves subtrees between live, trashed and destroyed."""

    def __init__(self, conn: sqlite3.Connection, clock: ClockProtocol) -> None:
        self.conn = conn
        self.clock = clock

    def _require(self, doc_id: str) -> Document:
        with storage_errors():
            doc = fetch_document(self.conn, doc_id)
        if doc is None:
            raise NotFoundError(doc_id)
        return doc

    def trash(self, doc_id: str) -> TrashResult:
        """Tombstone a document and its live descendants, then close the sibling gap.

        Trashing a document that is already in the trash changes nothing.
        """
        doc = self._require(doc_id)
        if doc.is_trashed:
            logger.debug("Document {} already trashed", doc_id)
            return TrashResult(document=doc, trashed_ids=[])

        now = self.clock.now()
        with transaction(self.conn):
            trashed_ids = [
                node_id
                for node_id, deleted_at in get_descendants(self.conn, doc_id)
                if deleted_at is None
            ]
            self.conn.executemany(
                "UPDATE documents SET deletedAt = ?, updatedAt = ? WHERE id = ?",
                [(now, now, node_id) for node_id in trashed_ids],
            )
            close_gap(self.conn, doc.parent_id, doc.sort_order)

        logger.debug("Trashed {} ({} documents)", doc_id, len(trashed_ids))
        return TrashResult(
            document=replace(doc, deleted_at=now, updated_at=now),
            trashed_ids=trashed_ids,
        )

    def restore(self, doc_id: str) -> RestoreResult:
        """Bring back a document and the descendants its trash cascaded to.

        The document returns to its frozen position among its parent's live
        children (clamped to the end). If the parent is gone or itself in the
        trash, the document is restored at the root level instead.
        """
        doc = self._require(doc_id)
        if not doc.is_trashed:
            return RestoreResult(document=doc, restored_ids=[])

        tombstone = doc.deleted_at
        now = self.clock.now()
        with transaction(self.conn):
            restored_ids = get_restore_chain_ids(self.conn, doc_id, tombstone)

            parent_id = doc.parent_id
            if parent_id is not None:
                parent = fetch_document(self.conn, parent_id)
                if parent is None or parent.is_trashed:
                    logger.info(
                        "Parent {} of {} is unavailable, restoring at root", parent_id, doc_id
                    )
                    parent_id = None

            position = min(doc.sort_order, live_sibling_count(self.conn, parent_id))
            open_gap(self.conn, parent_id, position)
            self.conn.execute(
                "UPDATE documents SET parentId = ?, sortOrder = ? WHERE id = ?",
                (parent_id, position, doc_id),
            )
            self.conn.executemany(
                "UPDATE documents SET deletedAt = NULL, updatedAt = ? WHERE id = ?",
                [(now, node_id) for node_id in restored_ids],
            )
            # Siblings inside the subtree may have been restored or purged on
            # their own while it sat in the trash.
            for node_id in restored_ids:
                renumber_children(self.conn, node_id)

        logger.debug("Restored {} ({} documents)", doc_id, len(restored_ids))
        return RestoreResult(
            document=replace(
                doc, deleted_at=None, updated_at=now, parent_id=parent_id, sort_order=position
            ),
            restored_ids=restored_ids,
        )

    def permanent_delete(self, doc_id: str) -> list[str]:
        """Delete a document and every descendant, live or trashed.

        Returns the destroyed ids, the document itself first.
        """
        doc = self._require(doc_id)
        with transaction(self.conn):
            deleted_ids = get_descendant_ids(self.conn, doc_id)
            self.conn.executemany(
                "DELETE FROM documents WHERE id = ?",
                [(node_id,) for node_id in deleted_ids],
            )
            if not doc.is_trashed:
                close_gap(self.conn, doc.parent_id, doc.sort_order)

        logger.debug("Permanently deleted {} ({} documents)", doc_id, len(deleted_ids))
        return deleted_ids
