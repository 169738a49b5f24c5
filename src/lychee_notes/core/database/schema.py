"""SQLite schema creation and migration for the document tree."""

import sqlite3

from loguru import logger

from lychee_notes.core.database.connection import storage_errors, transaction

SCHEMA_VERSION = 5

_META_SQL = """\
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
)"""

_SCHEMA_STATEMENTS = (
    """\
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    createdAt TEXT NOT NULL,
    updatedAt TEXT NOT NULL,
    parentId TEXT NULL,
    emoji TEXT NULL,
    deletedAt TEXT NULL,
    sortOrder INTEGER NOT NULL DEFAULT 0
)""",
    "CREATE INDEX IF NOT EXISTS idx_documents_updatedAt ON documents(updatedAt)",
    "CREATE INDEX IF NOT EXISTS idx_documents_parentId ON documents(parentId)",
    "CREATE INDEX IF NOT EXISTS idx_documents_sortOrder ON documents(parentId, sortOrder)",
    "CREATE INDEX IF NOT EXISTS idx_documents_deletedAt ON documents(deletedAt)",
)

# Upgrade path of databases written by earlier releases. Each step adds one
# column (plus its index) and is skipped when the column already exists.
_V1_STATEMENTS = (
    """\
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    createdAt TEXT NOT NULL,
    updatedAt TEXT NOT NULL
)""",
    "CREATE INDEX IF NOT EXISTS idx_documents_updatedAt ON documents(updatedAt)",
)

_UPGRADE_STEPS: tuple[tuple[int, str, tuple[str, ...]], ...] = (
    (
        2,
        "parentId",
        (
            "ALTER TABLE documents ADD COLUMN parentId TEXT NULL",
            "CREATE INDEX IF NOT EXISTS idx_documents_parentId ON documents(parentId)",
        ),
    ),
    (3, "emoji", ("ALTER TABLE documents ADD COLUMN emoji TEXT NULL",)),
    (
        4,
        "deletedAt",
        (
            "ALTER TABLE documents ADD COLUMN deletedAt TEXT NULL",
            "CREATE INDEX IF NOT EXISTS idx_documents_deletedAt ON documents(deletedAt)",
        ),
    ),
    (
        5,
        "sortOrder",
        (
            "ALTER TABLE documents ADD COLUMN sortOrder INTEGER NOT NULL DEFAULT 0",
            "CREATE INDEX IF NOT EXISTS idx_documents_sortOrder "
            "ON documents(parentId, sortOrder)",
            # Newer documents first, ties broken by id so positions stay dense.
            """\
UPDATE documents SET sortOrder = (
    SELECT COUNT(*) FROM documents d2
    WHERE d2.parentId IS documents.parentId
      AND d2.deletedAt IS NULL
      AND d2.id != documents.id
      AND (d2.updatedAt > documents.updatedAt
           OR (d2.updatedAt = documents.updatedAt AND d2.id < documents.id))
)""",
        ),
    ),
)


def _set_version(conn: sqlite3.Connection, version: int) -> None:
    set_metadata(conn, "schema_version", str(version))


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes at the latest version."""
    with transaction(conn):
        conn.execute(_META_SQL)
        for statement in _SCHEMA_STATEMENTS:
            conn.execute(statement)
        _set_version(conn, SCHEMA_VERSION)


def get_metadata(conn: sqlite3.Connection, key: str) -> str | None:
    """Return a metadata value, or None if unset or the table doesn't exist."""
    try:
        row = conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
    except sqlite3.OperationalError:
        return None
    return row[0] if row else None


def set_metadata(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        "INSERT INTO meta (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, value),
    )


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the current schema version, or None if the meta table doesn't exist."""
    value = get_metadata(conn, "schema_version")
    return int(value) if value is not None else None


def _documents_columns(conn: sqlite3.Connection) -> set[str]:
    return {row[1] for row in conn.execute("PRAGMA table_info(documents)").fetchall()}


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Create or migrate the database schema to the latest version."""
    with storage_errors():
        conn.execute(_META_SQL)
        columns = _documents_columns(conn)

    if not columns:
        create_schema(conn)
        logger.debug("Created schema version {}", SCHEMA_VERSION)
        return

    if (get_schema_version(conn) or 0) < 1:
        with transaction(conn):
            for statement in _V1_STATEMENTS:
                conn.execute(statement)
            _set_version(conn, 1)

    for version, column, statements in _UPGRADE_STEPS:
        if column in columns:
            continue
        with transaction(conn):
            for statement in statements:
                conn.execute(statement)
            _set_version(conn, version)
        columns.add(column)
        logger.info("Migrated schema to version {} (added {})", version, column)

    # Columns added by hand (or by a partial upgrade) may lack their index.
    with transaction(conn):
        for statement in _SCHEMA_STATEMENTS[1:]:
            conn.execute(statement)
        _set_version(conn, SCHEMA_VERSION)
