"""MCP server exposing the lychee-notes tree store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from lychee_notes.config import resolve_database_path
from lychee_notes.core.tree.outline import render_tree_as_markdown
from lychee_notes.errors import NotFoundError, TreeStoreError
from lychee_notes.models.document import Document
from lychee_notes.models.patch import DocumentPatch
from lychee_notes.protocols import TreeStoreProtocol
from lychee_notes.store import TreeStore


def _error(e: TreeStoreError) -> dict[str, Any]:
    return {"error": str(e), "kind": e.kind}


def _serialize(doc: Document, *, response_format: str = "detailed") -> dict[str, Any]:
    data = doc.to_dict()
    if response_format == "concise":
        data.pop("content")
    return data


def _page(
    docs: list[Document], *, offset: int | None, response_format: str
) -> dict[str, Any]:
    start = max(offset or 0, 0)
    return {
        "documents": [_serialize(d, response_format=response_format) for d in docs],
        "count": len(docs),
        "offset": start,
        "next_offset": start + len(docs),
    }


# --- Core functions (testable without MCP context) ---


def lychee_list_documents(
    store: TreeStoreProtocol,
    *,
    limit: int | None = None,
    offset: int | None = None,
    response_format: str = "concise",
) -> dict[str, Any]:
    """List live documents by sibling position.

    Args:
        limit: Max results (1-500, default 50).
        offset: Pagination offset.
        response_format: "concise" (no content) or "detailed".
    """
    try:
        docs = store.list(limit=limit, offset=offset)
    except TreeStoreError as e:
        return _error(e)
    return _page(docs, offset=offset, response_format=response_format)


def lychee_list_trashed(
    store: TreeStoreProtocol,
    *,
    limit: int | None = None,
    offset: int | None = None,
    response_format: str = "concise",
) -> dict[str, Any]:
    """List trashed documents, most recently trashed first.

    Args:
        limit: Max results (1-500, default 200).
        offset: Pagination offset.
        response_format: "concise" (no content) or "detailed".
    """
    try:
        docs = store.list_trashed(limit=limit, offset=offset)
    except TreeStoreError as e:
        return _error(e)
    return _page(docs, offset=offset, response_format=response_format)


def lychee_get_document(
    store: TreeStoreProtocol,
    *,
    doc_id: str,
    include_breadcrumbs: bool = True,
) -> dict[str, Any]:
    """Get one document. A missing id yields ``{"document": None}``, not an error."""
    try:
        doc = store.get(doc_id)
        if doc is None:
            return {"document": None}
        result: dict[str, Any] = {"document": _serialize(doc)}
        if include_breadcrumbs:
            crumbs = store.breadcrumbs(doc_id)
            result["breadcrumbs"] = " > ".join((c.title or "Untitled")[:40] for c in crumbs)
    except TreeStoreError as e:
        return _error(e)
    return result


def lychee_create_document(
    store: TreeStoreProtocol,
    *,
    title: str | None = None,
    content: str | None = None,
    parent_id: str | None = None,
    emoji: str | None = None,
) -> dict[str, Any]:
    """Create a document as the first child of ``parent_id`` (None = root level)."""
    try:
        doc = store.create(title=title, content=content, parent_id=parent_id, emoji=emoji)
    except TreeStoreError as e:
        return _error(e)
    return {"document": _serialize(doc)}


def lychee_update_document(
    store: TreeStoreProtocol,
    *,
    doc_id: str,
    fields: dict[str, Any],
) -> dict[str, Any]:
    """Patch title, content or emoji.

    Only keys present in ``fields`` change; ``null`` clears a nullable field.

    Args:
        doc_id: Document to update.
        fields: Any of "title", "content", "emoji" ("parentId" only if unchanged).
    """
    try:
        doc = store.update(doc_id, DocumentPatch.from_mapping(fields))
    except TreeStoreError as e:
        return _error(e)
    return {"document": _serialize(doc)}


def lychee_trash_document(store: TreeStoreProtocol, *, doc_id: str) -> dict[str, Any]:
    """Move a document and its subtree to the trash."""
    try:
        result = store.trash(doc_id)
    except TreeStoreError as e:
        return _error(e)
    return {"document": _serialize(result.document), "trashed_ids": result.trashed_ids}


def lychee_restore_document(store: TreeStoreProtocol, *, doc_id: str) -> dict[str, Any]:
    """Restore a trashed document and what its trash cascaded to."""
    try:
        result = store.restore(doc_id)
    except TreeStoreError as e:
        return _error(e)
    return {"document": _serialize(result.document), "restored_ids": result.restored_ids}


def lychee_permanent_delete(store: TreeStoreProtocol, *, doc_id: str) -> dict[str, Any]:
    """Irreversibly delete a document and every descendant."""
    try:
        deleted_ids = store.permanent_delete(doc_id)
    except TreeStoreError as e:
        return _error(e)
    return {"deleted_ids": deleted_ids, "count": len(deleted_ids)}


def lychee_move_document(
    store: TreeStoreProtocol,
    *,
    doc_id: str,
    parent_id: str | None,
    sort_order: int,
) -> dict[str, Any]:
    """Move a document under ``parent_id`` (None = root level) at ``sort_order``."""
    try:
        doc = store.move(doc_id, parent_id, sort_order)
    except TreeStoreError as e:
        return _error(e)
    return {"document": _serialize(doc)}


def lychee_read_tree(
    store: TreeStoreProtocol,
    *,
    root_id: str | None = None,
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Render the live tree (or one subtree) as a markdown outline with ids."""
    try:
        if root_id is not None and store.get(root_id) is None:
            raise NotFoundError(root_id)
        md = render_tree_as_markdown(
            store, root_id=root_id, max_depth=max_depth, show_ids=True
        )
    except TreeStoreError as e:
        return _error(e)
    estimated_tokens = len(md) // 4
    result: dict[str, Any] = {"content": md, "estimated_tokens": estimated_tokens}
    if estimated_tokens > 5000:
        result["warning"] = (
            f"Large result (~{estimated_tokens} tokens). "
            "Consider using max_depth to limit output."
        )
    return result


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: TreeStore
    db_path: Path
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open and migrate the database on startup, close on shutdown."""
    db_path = resolve_database_path()
    store = TreeStore.open(db_path)
    logger.info("Serving tree store at {}", db_path)
    try:
        yield ServerContext(store=store, db_path=db_path)
    finally:
        store.close()


mcp_server = FastMCP(
    "lychee-notes",
    instructions="""\
lychee-notes is a tree of notes. Every document has at most one parent and an
ordered position among its siblings.

## Tips
- Use lychee_read_tree_tool first to see the outline with document ids.
- Trash is reversible (lychee_restore_document_tool); permanent delete is not.
- To change a document's parent or position use lychee_move_document_tool,
  never lychee_update_document_tool.
- In lychee_update_document_tool only the keys you send change; send null to
  clear the emoji.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def lychee_list_documents_tool(
    ctx: Context,
    limit: int | None = None,
    offset: int | None = None,
    response_format: str = "concise",
) -> dict[str, Any]:
    """List live documents ordered by position among siblings.

    Args:
        limit: Max results (1-500, default 50).
        offset: Pagination offset.
        response_format: "concise" (no content) or "detailed".
    """
    return lychee_list_documents(
        _ctx(ctx).store, limit=limit, offset=offset, response_format=response_format
    )


@mcp_server.tool()
async def lychee_list_trashed_tool(
    ctx: Context,
    limit: int | None = None,
    offset: int | None = None,
    response_format: str = "concise",
) -> dict[str, Any]:
    """List documents in the trash, most recently trashed first.

    Args:
        limit: Max results (1-500, default 200).
        offset: Pagination offset.
        response_format: "concise" (no content) or "detailed".
    """
    return lychee_list_trashed(
        _ctx(ctx).store, limit=limit, offset=offset, response_format=response_format
    )


@mcp_server.tool()
async def lychee_get_document_tool(
    ctx: Context, doc_id: str, include_breadcrumbs: bool = True
) -> dict[str, Any]:
    """Get a document by id, live or trashed.

    Args:
        doc_id: Document id.
        include_breadcrumbs: Include the ancestor chain.
    """
    return lychee_get_document(
        _ctx(ctx).store, doc_id=doc_id, include_breadcrumbs=include_breadcrumbs
    )


@mcp_server.tool()
async def lychee_create_document_tool(
    ctx: Context,
    title: str | None = None,
    content: str | None = None,
    parent_id: str | None = None,
    emoji: str | None = None,
) -> dict[str, Any]:
    """Create a document at the top of its parent's children.

    Args:
        title: Title text.
        content: Editor state JSON ({"root": {"children": [...]}}) or empty.
        parent_id: Parent document id (omit for root level).
        emoji: Icon for the document.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_create_document(
            server.store, title=title, content=content, parent_id=parent_id, emoji=emoji
        )


@mcp_server.tool()
async def lychee_update_document_tool(
    ctx: Context, doc_id: str, fields: dict[str, Any]
) -> dict[str, Any]:
    """Update a document's title, content or emoji.

    Args:
        doc_id: Document id.
        fields: Keys to change. Omitted keys stay as they are; null clears emoji.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_update_document(server.store, doc_id=doc_id, fields=fields)


@mcp_server.tool()
async def lychee_trash_document_tool(ctx: Context, doc_id: str) -> dict[str, Any]:
    """Move a document and all of its descendants to the trash.

    Args:
        doc_id: Document id.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_trash_document(server.store, doc_id=doc_id)


@mcp_server.tool()
async def lychee_restore_document_tool(ctx: Context, doc_id: str) -> dict[str, Any]:
    """Restore a trashed document together with the descendants trashed with it.

    Args:
        doc_id: Document id.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_restore_document(server.store, doc_id=doc_id)


@mcp_server.tool()
async def lychee_permanent_delete_tool(ctx: Context, doc_id: str) -> dict[str, Any]:
    """Permanently delete a document and every descendant. Cannot be undone.

    Args:
        doc_id: Document id.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_permanent_delete(server.store, doc_id=doc_id)


@mcp_server.tool()
async def lychee_move_document_tool(
    ctx: Context, doc_id: str, parent_id: str | None = None, sort_order: int = 0
) -> dict[str, Any]:
    """Move a document to a new parent and/or position. Its subtree moves along.

    Args:
        doc_id: Document id.
        parent_id: New parent id (omit or null for root level).
        sort_order: Position among the new siblings, 0 = first.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return lychee_move_document(
            server.store, doc_id=doc_id, parent_id=parent_id, sort_order=sort_order
        )


@mcp_server.tool()
async def lychee_read_tree_tool(
    ctx: Context, root_id: str | None = None, max_depth: int | None = None
) -> dict[str, Any]:
    """Render the document tree as a markdown outline with ids.

    Args:
        root_id: Start from this document (omit for the whole tree).
        max_depth: Max depth levels (None = unlimited).
    """
    return lychee_read_tree(_ctx(ctx).store, root_id=root_id, max_depth=max_depth)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from lychee_notes.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
