"""Reparent engine: move a document to a new parent and/or sibling position."""

import sqlite3
from dataclasses import replace

from loguru import logger

from lychee_notes.core.database.connection import storage_errors, transaction
from lychee_notes.core.documents.validation import validate_sort_order
from lychee_notes.core.tree.navigation import fetch_document, get_descendant_ids
from lychee_notes.core.tree.ordering import (
    close_gap,
    live_sibling_count,
    open_gap,
    shift_between,
)
from lychee_notes.errors import InvalidReparentError, NotFoundError, ValidationError
from lychee_notes.models.document import Document
from lychee_notes.protocols import ClockProtocol


class ReparentEngine:
    """Keeps the tree acyclic and sibling positions dense while documents move."""

    def __init__(self, conn: sqlite3.Connection, clock: ClockProtocol) -> None:
        self.conn = conn
        self.clock = clock

    def _check_target(self, doc: Document, new_parent_id: str) -> None:
        if new_parent_id == doc.id:
            msg = f"Cannot move document {doc.id} into itself"
            raise InvalidReparentError(msg)

        with storage_errors():
            descendants = get_descendant_ids(self.conn, doc.id)
            parent = fetch_document(self.conn, new_parent_id)

        if new_parent_id in descendants:
            msg = f"Cannot move document {doc.id} into its descendant {new_parent_id}"
            raise InvalidReparentError(msg)
        if parent is None:
            raise NotFoundError(new_parent_id, what="Parent document")
        if parent.is_trashed:
            msg = f"Cannot move document {doc.id} under trashed parent {new_parent_id}"
            raise InvalidReparentError(msg)

    def move(self, doc_id: str, new_parent_id: str | None, new_sort_order: int) -> Document:
        """Place ``doc_id`` at ``new_sort_order`` among the live children of ``new_parent_id``.

        Positions past the end land at the end. The subtree under the document
        travels with it. Moving to the position a document already holds writes
        nothing.

        Raises:
            ValidationError: ``new_sort_order`` is not a non-negative int, or the
                document is in the trash.
            NotFoundError: the document or the new parent does not exist.
            InvalidReparentError: the move would create a cycle or targets a
                trashed parent.
        """
        new_sort_order = validate_sort_order(new_sort_order)

        with storage_errors():
            doc = fetch_document(self.conn, doc_id)
        if doc is None:
            raise NotFoundError(doc_id)
        if doc.is_trashed:
            msg = f"Cannot move trashed document {doc_id}; restore it first"
            raise ValidationError(msg)
        if new_parent_id is not None:
            self._check_target(doc, new_parent_id)

        with storage_errors():
            sibling_count = live_sibling_count(self.conn, new_parent_id, exclude_id=doc_id)
        target = min(new_sort_order, sibling_count)

        if new_parent_id == doc.parent_id:
            if target == doc.sort_order:
                return doc
            now = self.clock.now()
            with transaction(self.conn):
                shift_between(
                    self.conn, doc.parent_id, doc.sort_order, target, exclude_id=doc_id
                )
                self.conn.execute(
                    "UPDATE documents SET sortOrder = ?, updatedAt = ? WHERE id = ?",
                    (target, now, doc_id),
                )
            logger.debug("Reordered {} from {} to {}", doc_id, doc.sort_order, target)
            return replace(doc, sort_order=target, updated_at=now)

        now = self.clock.now()
        with transaction(self.conn):
            close_gap(self.conn, doc.parent_id, doc.sort_order, exclude_id=doc_id)
            open_gap(self.conn, new_parent_id, target, exclude_id=doc_id)
            self.conn.execute(
                "UPDATE documents SET parentId = ?, sortOrder = ?, updatedAt = ? WHERE id = ?",
                (new_parent_id, target, now, doc_id),
            )
        logger.debug(
            "Moved {} from {} to {} at {}",
            doc_id,
            doc.parent_id or "root",
            new_parent_id or "root",
            target,
        )
        return replace(doc, parent_id=new_parent_id, sort_order=target, updated_at=now)
