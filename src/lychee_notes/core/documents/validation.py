"""Input normalization and validation, applied before any transaction opens."""

import json
from typing import Any

from lychee_notes.config import MAX_PAGE_SIZE, UNTITLED_SENTINEL
from lychee_notes.errors import ValidationError


def normalize_title(title: str | None) -> str:
    """Trim a title; the legacy "Untitled" placeholder becomes the empty string."""
    if title is None:
        return ""
    if not isinstance(title, str):
        msg = f"title must be a string, got {type(title).__name__}"
        raise ValidationError(msg)
    trimmed = title.strip()
    if trimmed == UNTITLED_SENTINEL:
        return ""
    return trimmed


def validate_content(content: str | None) -> str:
    """Check the editor-state envelope and return the content unchanged.

    Empty content is accepted. Anything else must be JSON of the shape
    ``{"root": {"children": [...], ...}, ...}``; the inside of ``children`` is
    never looked at.
    """
    if content is None or content == "":
        return ""
    if not isinstance(content, str):
        msg = f"content must be a string, got {type(content).__name__}"
        raise ValidationError(msg)
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as e:
        msg = f"content is not valid JSON: {e.msg} at position {e.pos}"
        raise ValidationError(msg) from e
    if not isinstance(data, dict):
        raise ValidationError("content must be a JSON object")
    root = data.get("root")
    if not isinstance(root, dict):
        raise ValidationError("content is missing a 'root' object")
    if not isinstance(root.get("children"), list):
        raise ValidationError("content root must have a 'children' array")
    return content


def validate_emoji(emoji: str | None) -> str | None:
    if emoji is None:
        return None
    if not isinstance(emoji, str):
        msg = f"emoji must be a string, got {type(emoji).__name__}"
        raise ValidationError(msg)
    return emoji


def validate_sort_order(value: Any) -> int:
    """Accept only non-negative ints; bools and floats are rejected, not coerced."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"sortOrder must be an integer, got {value!r}"
        raise ValidationError(msg)
    if value < 0:
        msg = f"sortOrder must be non-negative, got {value}"
        raise ValidationError(msg)
    return value


def clamp_page(limit: int | None, offset: int | None, *, default_limit: int) -> tuple[int, int]:
    """Clamp pagination to 1..MAX_PAGE_SIZE and a non-negative offset."""
    limit = default_limit if limit is None else limit
    offset = 0 if offset is None else offset
    return max(1, min(limit, MAX_PAGE_SIZE)), max(offset, 0)
