"""Domain models for the tree store."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    """A single note in the document tree."""

    id: str
    title: str
    content: str
    created_at: str
    updated_at: str
    parent_id: str | None = None
    emoji: str | None = None
    deleted_at: str | None = None
    sort_order: int = 0

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the field names of the persisted table."""
        data = asdict(self)
        return {
            "id": data["id"],
            "title": data["title"],
            "content": data["content"],
            "createdAt": data["created_at"],
            "updatedAt": data["updated_at"],
            "parentId": data["parent_id"],
            "emoji": data["emoji"],
            "deletedAt": data["deleted_at"],
            "sortOrder": data["sort_order"],
        }


@dataclass(frozen=True)
class TrashResult:
    """Outcome of trashing a document: its new state and every id tombstoned."""

    document: Document
    trashed_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RestoreResult:
    """Outcome of restoring a document: its new state and every id restored."""

    document: Document
    restored_ids: list[str] = field(default_factory=list)
