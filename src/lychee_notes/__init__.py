"""Local hierarchical note store with trash, restore and move."""

from lychee_notes.errors import (
    InvalidReparentError,
    NotFoundError,
    StorageIOError,
    TreeStoreError,
    ValidationError,
)
from lychee_notes.models.document import Document, RestoreResult, TrashResult
from lychee_notes.models.patch import SET_NULL, UNSET, DocumentPatch, SetValue
from lychee_notes.store import TreeStore

__all__ = [
    "SET_NULL",
    "UNSET",
    "Document",
    "DocumentPatch",
    "InvalidReparentError",
    "NotFoundError",
    "RestoreResult",
    "SetValue",
    "StorageIOError",
    "TrashResult",
    "TreeStore",
    "TreeStoreError",
    "ValidationError",
]
