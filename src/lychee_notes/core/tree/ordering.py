"""Sibling-order maintenance for live children of one parent.

All helpers touch live rows only (``deletedAt IS NULL``) and are meant to be
called inside an open transaction. Shifting siblings changes their position,
not their content, so their updatedAt is left alone.
"""

import sqlite3


def live_sibling_count(
    conn: sqlite3.Connection,
    parent_id: str | None,
    *,
    exclude_id: str | None = None,
) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM documents "
        "WHERE parentId IS ? AND deletedAt IS NULL AND id IS NOT ?",
        (parent_id, exclude_id),
    ).fetchone()
    return int(row[0])


def close_gap(
    conn: sqlite3.Connection,
    parent_id: str | None,
    position: int,
    *,
    exclude_id: str | None = None,
) -> None:
    """Pull every live sibling past ``position`` up by one."""
    conn.execute(
        "UPDATE documents SET sortOrder = sortOrder - 1 "
        "WHERE parentId IS ? AND deletedAt IS NULL AND sortOrder > ? AND id IS NOT ?",
        (parent_id, position, exclude_id),
    )


def open_gap(
    conn: sqlite3.Connection,
    parent_id: str | None,
    position: int,
    *,
    exclude_id: str | None = None,
) -> None:
    """Push every live sibling at or past ``position`` down by one."""
    conn.execute(
        "UPDATE documents SET sortOrder = sortOrder + 1 "
        "WHERE parentId IS ? AND deletedAt IS NULL AND sortOrder >= ? AND id IS NOT ?",
        (parent_id, position, exclude_id),
    )


def shift_between(
    conn: sqlite3.Connection,
    parent_id: str | None,
    old_position: int,
    new_position: int,
    *,
    exclude_id: str,
) -> None:
    """Make room for a sibling moving from ``old_position`` to ``new_position``.

    Only siblings between the two positions move, one step toward the slot
    being vacated.
    """
    if new_position > old_position:
        conn.execute(
            "UPDATE documents SET sortOrder = sortOrder - 1 "
            "WHERE parentId IS ? AND deletedAt IS NULL AND id != ? "
            "AND sortOrder > ? AND sortOrder <= ?",
            (parent_id, exclude_id, old_position, new_position),
        )
    elif new_position < old_position:
        conn.execute(
            "UPDATE documents SET sortOrder = sortOrder + 1 "
            "WHERE parentId IS ? AND deletedAt IS NULL AND id != ? "
            "AND sortOrder >= ? AND sortOrder < ?",
            (parent_id, exclude_id, new_position, old_position),
        )


def renumber_children(conn: sqlite3.Connection, parent_id: str | None) -> None:
    """Rewrite live children's positions as 0..n-1, keeping their relative order."""
    rows = conn.execute(
        "SELECT id, sortOrder FROM documents "
        "WHERE parentId IS ? AND deletedAt IS NULL "
        "ORDER BY sortOrder, updatedAt DESC, id",
        (parent_id,),
    ).fetchall()
    changes = [(position, row[0]) for position, row in enumerate(rows) if row[1] != position]
    if changes:
        conn.executemany("UPDATE documents SET sortOrder = ? WHERE id = ?", changes)
