"""Protocols for dependency injection in the tree store."""

from typing import Protocol, runtime_checkable

from lychee_notes.models.document import Document, RestoreResult, TrashResult
from lychee_notes.models.patch import DocumentPatch


@runtime_checkable
class ClockProtocol(Protocol):
    """Source of timestamps for createdAt/updatedAt/deletedAt."""

    def now(self) -> str:
        """Return the current time as an ISO-8601 string."""
        ...


@runtime_checkable
class TreeStoreProtocol(Protocol):
    """The operations the service boundaries call on the tree store."""

    def list_trashed(
        self, *, limit: int | None = None, offset: int | None = None
    ) -> list[Document]:
        """List trashed documents, most recently trashed first."""
        ...

    def get(self, doc_id: str) -> Document | None:
        """Return the document or None."""
        ...

    def children(self, parent_id: str | None) -> list[Document]:
        """Return live children of a parent in sibling order."""
        ...

    def breadcrumbs(self, doc_id: str) -> list[Document]:
        """Return the ancestors of a document, root first."""
        ...

    def create(
        self,
        *,
        title: str | None = None,
        content: str | None = None,
        parent_id: str | None = None,
        emoji: str | None = None,
    ) -> Document:
        """Create a document as the first child of its parent."""
        ...

    def update(self, doc_id: str, patch: DocumentPatch) -> Document:
        """Apply a partial update."""
        ...

    def trash(self, doc_id: str) -> TrashResult:
        """Move a subtree to the trash."""
        ...

    def restore(self, doc_id: str) -> RestoreResult:
        """Bring a trashed subtree back."""
        ...

    def permanent_delete(self, doc_id: str) -> list[str]:
        """Remove a subtree for good."""
        ...

    def move(self, doc_id: str, new_parent_id: str | None, new_sort_order: int) -> Document:
        """Reparent and/or reorder a document."""
        ...

    # Keep last: shadows the builtin list in later annotations.
    def list(self, *, limit: int | None = None, offset: int | None = None) -> list[Document]:
        """List live documents."""
        ...
