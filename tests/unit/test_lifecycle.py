"""Tests for trash, restore and permanent delete."""

import sqlite3

import pytest

from lychee_notes.errors import NotFoundError
from lychee_notes.models.document import Document
from lychee_notes.store import TreeStore
from tests.unit.tree_checks import (
    assert_dense_ordering,
    assert_no_live_under_trashed,
    child_ids,
    updated_at_snapshot,
)


def test_trash_cascades_to_every_descendant(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    result = store.trash(sample_tree["work"].id)
    expected = {sample_tree[k].id for k in ("work", "projects", "alpha", "beta", "meetings")}
    assert set(result.trashed_ids) == expected
    assert result.trashed_ids[0] == sample_tree["work"].id
    assert result.document.is_trashed
    for doc_id in expected:
        doc = store.get(doc_id)
        assert doc is not None
        assert doc.deleted_at == result.document.deleted_at
    assert_no_live_under_trashed(conn)


def test_trash_closes_sibling_gap(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["work"].id)
    home = store.get(sample_tree["home"].id)
    assert home is not None
    assert home.sort_order == 0
    assert_dense_ordering(conn)


def test_trash_sets_updated_at_to_tombstone(store: TreeStore) -> None:
    doc = store.create(title="x")
    result = store.trash(doc.id)
    assert result.document.updated_at == result.document.deleted_at


def test_trash_already_trashed_is_noop(store: TreeStore) -> None:
    doc = store.create(title="x")
    first = store.trash(doc.id)
    again = store.trash(doc.id)
    assert again.trashed_ids == []
    assert again.document == first.document


def test_trash_missing_raises_not_found(store: TreeStore) -> None:
    with pytest.raises(NotFoundError):
        store.trash("missing")


def test_trash_leaves_earlier_trashed_descendant_tombstone(
    store: TreeStore, sample_tree: dict[str, Document]
) -> None:
    alpha = store.trash(sample_tree["alpha"].id).document
    result = store.trash(sample_tree["work"].id)
    assert sample_tree["alpha"].id not in result.trashed_ids
    reloaded = store.get(sample_tree["alpha"].id)
    assert reloaded is not None
    assert reloaded.deleted_at == alpha.deleted_at


def test_trash_restore_round_trip(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    before_root = child_ids(conn, None)
    before_projects = child_ids(conn, sample_tree["projects"].id)
    trashed = store.trash(sample_tree["work"].id)
    restored = store.restore(sample_tree["work"].id)
    assert sorted(restored.restored_ids) == sorted(trashed.trashed_ids)
    assert child_ids(conn, None) == before_root
    assert child_ids(conn, sample_tree["projects"].id) == before_projects
    assert not restored.document.is_trashed
    assert_dense_ordering(conn)


def test_restore_keeps_independently_trashed_subtree_in_trash(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["alpha"].id)
    store.trash(sample_tree["work"].id)
    restored = store.restore(sample_tree["work"].id)
    assert sample_tree["alpha"].id not in restored.restored_ids
    alpha = store.get(sample_tree["alpha"].id)
    assert alpha is not None
    assert alpha.is_trashed
    assert child_ids(conn, sample_tree["projects"].id) == [sample_tree["beta"].id]
    assert_dense_ordering(conn)


def test_restore_returns_to_frozen_position(
    store: TreeStore, conn: sqlite3.Connection
) -> None:
    c = store.create(title="c")
    b = store.create(title="b")
    a = store.create(title="a")
    store.trash(b.id)
    assert child_ids(conn, None) == [a.id, c.id]
    store.restore(b.id)
    assert child_ids(conn, None) == [a.id, b.id, c.id]
    assert_dense_ordering(conn)


def test_restore_clamps_position_past_end(store: TreeStore, conn: sqlite3.Connection) -> None:
    last = store.create(title="last")
    store.create(title="middle")
    store.create(title="first")
    store.trash(last.id)
    for doc_id in child_ids(conn, None):
        store.permanent_delete(doc_id)
    result = store.restore(last.id)
    assert result.document.sort_order == 0
    assert_dense_ordering(conn)


def test_restore_under_trashed_parent_rehomes_to_root(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["alpha"].id)
    store.trash(sample_tree["work"].id)
    result = store.restore(sample_tree["alpha"].id)
    assert result.document.parent_id is None
    assert sample_tree["alpha"].id in child_ids(conn, None)
    assert_no_live_under_trashed(conn)
    assert_dense_ordering(conn)


def test_restore_with_missing_parent_rehomes_to_root(
    store: TreeStore, conn: sqlite3.Connection
) -> None:
    parent = store.create(title="parent")
    child = store.create(title="child", parent_id=parent.id)
    store.trash(child.id)
    # Rows removed outside the store, as in hand-edited legacy files.
    conn.execute("DELETE FROM documents WHERE id = ?", (parent.id,))
    result = store.restore(child.id)
    assert result.document.parent_id is None
    assert_dense_ordering(conn)


def test_restore_live_is_noop(store: TreeStore, conn: sqlite3.Connection) -> None:
    doc = store.create(title="x")
    before = updated_at_snapshot(conn)
    result = store.restore(doc.id)
    assert result.restored_ids == []
    assert result.document == doc
    assert updated_at_snapshot(conn) == before


def test_restore_missing_raises_not_found(store: TreeStore) -> None:
    with pytest.raises(NotFoundError):
        store.restore("missing")


def test_restore_after_child_purged_keeps_children_dense(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["projects"].id)
    store.permanent_delete(sample_tree["alpha"].id)
    store.restore(sample_tree["projects"].id)
    beta = store.get(sample_tree["beta"].id)
    assert beta is not None
    assert beta.sort_order == 0
    assert_dense_ordering(conn)


def test_permanent_delete_returns_whole_subtree(
    store: TreeStore, conn: sqlite3.Connection
) -> None:
    root = store.create(title="root")
    child_a = store.create(title="a", parent_id=root.id)
    child_b = store.create(title="b", parent_id=root.id)
    grandchild = store.create(title="g", parent_id=child_a.id)
    deleted = store.permanent_delete(root.id)
    assert len(deleted) == 4
    assert deleted[0] == root.id
    assert set(deleted) == {root.id, child_a.id, child_b.id, grandchild.id}
    for doc_id in deleted:
        assert store.get(doc_id) is None


def test_permanent_delete_includes_trashed_descendants(
    store: TreeStore, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["alpha"].id)
    deleted = store.permanent_delete(sample_tree["projects"].id)
    assert set(deleted) == {
        sample_tree["projects"].id,
        sample_tree["alpha"].id,
        sample_tree["beta"].id,
    }


def test_permanent_delete_live_closes_gap(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.permanent_delete(sample_tree["work"].id)
    assert child_ids(conn, None) == [sample_tree["home"].id]
    assert_dense_ordering(conn)


def test_permanent_delete_trashed_leaves_live_siblings(
    store: TreeStore, conn: sqlite3.Connection, sample_tree: dict[str, Document]
) -> None:
    store.trash(sample_tree["work"].id)
    before = child_ids(conn, None)
    store.permanent_delete(sample_tree["work"].id)
    assert child_ids(conn, None) == before
    assert_dense_ordering(conn)


def test_permanent_delete_missing_raises_not_found(store: TreeStore) -> None:
    with pytest.raises(NotFoundError):
        store.permanent_delete("missing")
