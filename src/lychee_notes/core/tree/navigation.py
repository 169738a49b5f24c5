"""Tree navigation: lookups, children, breadcrumbs and descendant closure."""

import sqlite3

from lychee_notes.models.document import Document

DOCUMENT_COLUMNS = (
    "id, title, content, createdAt, updatedAt, parentId, emoji, deletedAt, sortOrder"
)
_PREFIXED_COLUMNS = ", ".join(f"d.{column.strip()}" for column in DOCUMENT_COLUMNS.split(","))


def row_to_document(row: sqlite3.Row | tuple) -> Document:
    return Document(
        id=row[0],
        title=row[1],
        content=row[2],
        created_at=row[3],
        updated_at=row[4],
        parent_id=row[5],
        emoji=row[6],
        deleted_at=row[7],
        sort_order=row[8] if row[8] is not None else 0,
    )


def fetch_document(conn: sqlite3.Connection, doc_id: str) -> Document | None:
    """Return the row for ``doc_id`` whether live or trashed."""
    row = conn.execute(
        f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE id = ?",
        (doc_id,),
    ).fetchone()
    return row_to_document(row) if row else None


def get_children(
    conn: sqlite3.Connection,
    *,
    parent_id: str | None,
) -> tuple[Document, ...]:
    """Get live children of a parent (None = root level), ordered by sortOrder."""
    query = (
        f"SELECT {DOCUMENT_COLUMNS} FROM documents "
        "WHERE parentId IS ? AND deletedAt IS NULL "
        "ORDER BY sortOrder, updatedAt DESC"
    )
    rows = conn.execute(query, (parent_id,)).fetchall()
    return tuple(row_to_document(r) for r in rows)


def get_breadcrumbs(conn: sqlite3.Connection, doc_id: str) -> tuple[Document, ...]:
    """Get the ancestors of a document.

    Returns documents in order from root to immediate parent (excludes the node itself).
    """
    rows = conn.execute(
        f"""WITH RECURSIVE ancestors(id, parentId, depth) AS (
                SELECT id, parentId, 0 FROM documents WHERE id = ?
                UNION
                SELECT d.id, d.parentId, a.depth + 1
                FROM documents d JOIN ancestors a ON d.id = a.parentId
                WHERE a.depth < (SELECT COUNT(*) FROM documents)
            )
            SELECT {_PREFIXED_COLUMNS}
            FROM ancestors a JOIN documents d ON d.id = a.id
            WHERE a.depth > 0
            ORDER BY a.depth DESC""",
        (doc_id,),
    ).fetchall()
    return tuple(row_to_document(r) for r in rows)


def get_descendants(conn: sqlite3.Connection, doc_id: str) -> list[tuple[str, str | None]]:
    """Return ``(id, deletedAt)`` for ``doc_id`` and every descendant, breadth-first.

    Trashed and live nodes alike; the closure follows parentId only.
    """
    rows = conn.execute(
        """WITH RECURSIVE tree(id, deletedAt) AS (
               SELECT id, deletedAt FROM documents WHERE id = ?
               UNION
               SELECT d.id, d.deletedAt FROM documents d JOIN tree t ON d.parentId = t.id
           )
           SELECT id, deletedAt FROM tree""",
        (doc_id,),
    ).fetchall()
    return [(r[0], r[1]) for r in rows]


def get_descendant_ids(conn: sqlite3.Connection, doc_id: str) -> list[str]:
    """Return ``doc_id`` followed by every descendant id."""
    return [node_id for node_id, _ in get_descendants(conn, doc_id)]


def get_restore_chain_ids(conn: sqlite3.Connection, doc_id: str, tombstone: str) -> list[str]:
    """Return ``doc_id`` plus descendants reachable through nodes carrying ``tombstone``.

    The walk stops at live nodes and at nodes trashed by a different operation,
    so subtrees trashed on their own earlier are left alone.
    """
    rows = conn.execute(
        """WITH RECURSIVE chain(id) AS (
               SELECT id FROM documents WHERE id = ?
               UNION
               SELECT d.id FROM documents d JOIN chain c ON d.parentId = c.id
               WHERE d.deletedAt = ?
           )
           SELECT id FROM chain""",
        (doc_id, tombstone),
    ).fetchall()
    return [r[0] for r in rows]
