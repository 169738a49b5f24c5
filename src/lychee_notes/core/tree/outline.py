"""Render the live document tree as a markdown outline."""

import io

from lychee_notes.models.document import Document
from lychee_notes.protocols import TreeStoreProtocol

_INDENT = "    "


def _label(doc: Document) -> str:
    title = doc.title or "Untitled"
    return f"{doc.emoji} {title}" if doc.emoji else title


def render_tree_as_markdown(
    store: TreeStoreProtocol,
    *,
    root_id: str | None = None,
    max_depth: int | None = None,
    show_ids: bool = False,
) -> str:
    """Render live documents as an indented bullet list in sibling order.

    Args:
        store: Tree store to read from.
        root_id: Render this document and its subtree; None renders every root.
        max_depth: Max levels below the starting level to include (None = unlimited).
        show_ids: Append each document's id.

    Returns:
        Markdown string, empty if ``root_id`` is missing or trashed.
    """
    if root_id is not None:
        root = store.get(root_id)
        if root is None or root.is_trashed:
            return ""
        top_level = [root]
    else:
        top_level = store.children(None)

    out = io.StringIO()

    def write(doc: Document, depth: int) -> None:
        indent = _INDENT * depth
        suffix = f"  [id={doc.id}]" if show_ids else ""
        out.write(f"{indent}- {_label(doc)}{suffix}\n")

        children = store.children(doc.id)
        if not children:
            return
        if max_depth is not None and depth >= max_depth:
            # Truncation indicator when children are cut off by max_depth
            noun = "child" if len(children) == 1 else "children"
            out.write(f"{indent}{_INDENT}- ... ({len(children)} more {noun}, id={doc.id})\n")
            return
        for child in children:
            write(child, depth + 1)

    for doc in top_level:
        write(doc, 0)
    return out.getvalue()
