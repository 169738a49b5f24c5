"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from lychee_notes.core.database.connection import MEMORY_DB, open_database
from lychee_notes.core.database.schema import migrate_schema
from lychee_notes.models.document import Document
from lychee_notes.store import TreeStore
from tests.unit.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """Return an in-memory DB at the latest schema version."""
    conn = open_database(MEMORY_DB)
    migrate_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(conn: sqlite3.Connection, clock: FakeClock) -> TreeStore:
    return TreeStore(conn, clock=clock)


@pytest.fixture
def sample_tree(store: TreeStore) -> dict[str, Document]:
    """Build a small tree through the public API.

    Layout in position order::

        work
            projects
                alpha
                beta
            meetings
        home
            garden

    Documents are created in reverse order because create inserts first.
    """
    home = store.create(title="home", emoji="🏠")
    work = store.create(title="work")
    meetings = store.create(title="meetings", parent_id=work.id)
    projects = store.create(title="projects", parent_id=work.id)
    beta = store.create(title="beta", parent_id=projects.id)
    alpha = store.create(title="alpha", parent_id=projects.id)
    garden = store.create(title="garden", parent_id=home.id)
    return {
        "work": work,
        "projects": projects,
        "alpha": alpha,
        "beta": beta,
        "meetings": meetings,
        "home": home,
        "garden": garden,
    }
