"""Tests for listings and lookups."""

from lychee_notes.models.document import Document
from lychee_notes.store import TreeStore


def test_list_empty_store_returns_empty_list(store: TreeStore) -> None:
    assert store.list() == []
    assert store.list_trashed() == []


def test_two_creates_at_root_list_newest_first(store: TreeStore) -> None:
    first = store.create(title="first")
    second = store.create(title="second")
    docs = store.list()
    assert [d.id for d in docs] == [second.id, first.id]
    assert [d.sort_order for d in docs] == [0, 1]


def test_list_excludes_trashed(store: TreeStore, sample_tree: dict[str, Document]) -> None:
    store.trash(sample_tree["home"].id)
    ids = {d.id for d in store.list()}
    assert sample_tree["home"].id not in ids
    assert sample_tree["garden"].id not in ids
    assert sample_tree["work"].id in ids


def test_list_trashed_most_recent_first(store: TreeStore) -> None:
    a = store.create(title="a")
    b = store.create(title="b")
    store.trash(a.id)
    store.trash(b.id)
    assert [d.id for d in store.list_trashed()] == [b.id, a.id]


def test_list_limit_and_offset(store: TreeStore) -> None:
    for i in range(5):
        store.create(title=f"doc {i}")
    assert len(store.list(limit=2)) == 2
    assert [d.title for d in store.list(limit=2, offset=1)] == ["doc 3", "doc 2"]


def test_list_clamps_bad_pagination(store: TreeStore) -> None:
    for i in range(3):
        store.create(title=f"doc {i}")
    assert len(store.list(limit=0)) == 1
    assert len(store.list(limit=-10)) == 1
    assert len(store.list(offset=-4)) == 3


def test_list_default_limit_is_fifty(store: TreeStore) -> None:
    for i in range(55):
        store.create(title=f"doc {i}")
    assert len(store.list()) == 50


def test_get_missing_returns_none(store: TreeStore) -> None:
    assert store.get("nope") is None


def test_get_returns_trashed_document(store: TreeStore) -> None:
    doc = store.create(title="gone soon")
    store.trash(doc.id)
    fetched = store.get(doc.id)
    assert fetched is not None
    assert fetched.is_trashed


def test_children_in_position_order(store: TreeStore, sample_tree: dict[str, Document]) -> None:
    children = store.children(sample_tree["projects"].id)
    assert [c.title for c in children] == ["alpha", "beta"]
    assert [c.title for c in store.children(None)] == ["work", "home"]


def test_breadcrumbs_root_first_excluding_self(
    store: TreeStore, sample_tree: dict[str, Document]
) -> None:
    crumbs = store.breadcrumbs(sample_tree["alpha"].id)
    assert [c.title for c in crumbs] == ["work", "projects"]
    assert store.breadcrumbs(sample_tree["work"].id) == []
