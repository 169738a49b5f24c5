"""Partial-update patches where "absent" and "null" are different signals.

Each optional field of an update carries one of three tags:

- ``UNSET``        -- leave the stored value alone
- ``SET_NULL``     -- store NULL (only legal for nullable columns)
- ``SetValue(v)``  -- store ``v``

Boundaries that receive plain mappings convert them with
:meth:`DocumentPatch.from_mapping`: a missing key becomes ``UNSET`` and an
explicit ``None`` becomes ``SET_NULL``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from lychee_notes.errors import ValidationError


@dataclass(frozen=True)
class Unset:
    """Field not present in the patch."""


@dataclass(frozen=True)
class SetNull:
    """Field explicitly set to null."""


@dataclass(frozen=True)
class SetValue:
    """Field set to a concrete value."""

    value: Any


UNSET = Unset()
SET_NULL = SetNull()

FieldPatch = Unset | SetNull | SetValue

# Mapping keys accepted by from_mapping, both wire (camelCase) and Python spelling.
_KEY_ALIASES: dict[str, str] = {
    "title": "title",
    "content": "content",
    "emoji": "emoji",
    "parentId": "parent_id",
    "parent_id": "parent_id",
}


def field_from_mapping(mapping: Mapping[str, Any], key: str) -> FieldPatch:
    if key not in mapping:
        return UNSET
    value = mapping[key]
    if value is None:
        return SET_NULL
    return SetValue(value)


@dataclass(frozen=True)
class DocumentPatch:
    """Fields to change on a document; anything left ``UNSET`` is untouched."""

    title: FieldPatch = UNSET
    content: FieldPatch = UNSET
    emoji: FieldPatch = UNSET
    parent_id: FieldPatch = UNSET

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, Unset | SetNull | SetValue):
                msg = f"{f.name} must be UNSET, SET_NULL or SetValue(...), got {value!r}"
                raise ValidationError(msg)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "DocumentPatch":
        """Build a patch from a boundary payload, ignoring unknown keys such as ``id``."""
        kwargs: dict[str, FieldPatch] = {}
        for key, attr in _KEY_ALIASES.items():
            if key in mapping:
                kwargs[attr] = field_from_mapping(mapping, key)
        return cls(**kwargs)

    def is_empty(self) -> bool:
        return all(isinstance(getattr(self, f.name), Unset) for f in fields(self))
