"""Mutation engine: create documents and patch their scalar fields."""

import sqlite3
import uuid
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from loguru import logger

from lychee_notes.core.database.connection import storage_errors, transaction
from lychee_notes.core.documents.validation import (
    normalize_title,
    validate_content,
    validate_emoji,
)
from lychee_notes.core.tree.navigation import fetch_document
from lychee_notes.core.tree.ordering import open_gap
from lychee_notes.errors import NotFoundError, ValidationError
from lychee_notes.models.document import Document
from lychee_notes.models.patch import DocumentPatch, FieldPatch, SetNull, SetValue, Unset
from lychee_notes.protocols import ClockProtocol


def _apply_field(
    field_patch: FieldPatch,
    current: Any,
    *,
    name: str,
    nullable: bool,
    normalize: Callable[[Any], Any],
) -> Any:
    if isinstance(field_patch, SetValue):
        return normalize(field_patch.value)
    if isinstance(field_patch, SetNull):
        if not nullable:
            msg = f"{name} cannot be null"
            raise ValidationError(msg)
        return None
    if isinstance(field_patch, Unset):
        return current
    msg = f"{name} patch must be UNSET, SET_NULL or SetValue(...), got {field_patch!r}"
    raise ValidationError(msg)


class MutationEngine:
    """Creates documents and updates title, content and emoji in place."""

    def __init__(self, conn: sqlite3.Connection, clock: ClockProtocol) -> None:
        self.conn = conn
        self.clock = clock

    def create(
        self,
        *,
        title: str | None = None,
        content: str | None = None,
        parent_id: str | None = None,
        emoji: str | None = None,
    ) -> Document:
        """Insert a live document as the first child of ``parent_id``.

        Every live sibling moves down one position in the same transaction.

        Raises:
            NotFoundError: ``parent_id`` does not exist.
            ValidationError: bad content envelope, or the parent is in the trash.
        """
        title = normalize_title(title)
        content = validate_content(content)
        emoji = validate_emoji(emoji)

        if parent_id is not None:
            with storage_errors():
                parent = fetch_document(self.conn, parent_id)
            if parent is None:
                raise NotFoundError(parent_id, what="Parent document")
            if parent.is_trashed:
                msg = f"Cannot create a document under trashed parent {parent_id}"
                raise ValidationError(msg)

        now = self.clock.now()
        doc = Document(
            id=str(uuid.uuid4()),
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
            parent_id=parent_id,
            emoji=emoji,
            deleted_at=None,
            sort_order=0,
        )

        with transaction(self.conn):
            open_gap(self.conn, parent_id, 0)
            self.conn.execute(
                """INSERT INTO documents
                   (id, title, content, createdAt, updatedAt, parentId, emoji, deletedAt, sortOrder)
                   VALUES (?, ?, ?, ?, ?, ?, ?, NULL, 0)""",
                (doc.id, doc.title, doc.content, now, now, parent_id, emoji),
            )

        logger.debug("Created document {} under {}", doc.id, parent_id or "root")
        return doc

    def update(self, doc_id: str, patch: DocumentPatch) -> Document:
        """Apply the fields present in ``patch``; updatedAt is always bumped.

        ``parent_id`` may only repeat the current parent. Reparenting goes
        through the reparent engine so sibling order stays dense.
        """
        with storage_errors():
            existing = fetch_document(self.conn, doc_id)
        if existing is None:
            raise NotFoundError(doc_id)
        if patch.is_empty():
            logger.debug("Empty patch for {}, touching updatedAt only", doc_id)

        title = _apply_field(
            patch.title, existing.title, name="title", nullable=False, normalize=normalize_title
        )
        content = _apply_field(
            patch.content,
            existing.content,
            name="content",
            nullable=False,
            normalize=validate_content,
        )
        emoji = _apply_field(
            patch.emoji, existing.emoji, name="emoji", nullable=True, normalize=validate_emoji
        )
        parent_id = _apply_field(
            patch.parent_id, existing.parent_id, name="parentId", nullable=True, normalize=str
        )
        if parent_id != existing.parent_id:
            msg = "parentId cannot be changed by update; use move"
            raise ValidationError(msg)

        now = self.clock.now()
        with transaction(self.conn):
            self.conn.execute(
                "UPDATE documents SET title = ?, content = ?, emoji = ?, updatedAt = ? "
                "WHERE id = ?",
                (title, content, emoji, now, doc_id),
            )

        logger.debug("Updated document {}", doc_id)
        return replace(existing, title=title, content=content, emoji=emoji, updated_at=now)
