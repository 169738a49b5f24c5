"""CLI for lychee-notes (browse, edit and reorganize the document tree)."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from lychee_notes.config import resolve_database_path
from lychee_notes.core.tree.outline import render_tree_as_markdown
from lychee_notes.errors import NotFoundError, TreeStoreError
from lychee_notes.logging_config import configure_logging
from lychee_notes.models.document import Document
from lychee_notes.models.patch import DocumentPatch
from lychee_notes.store import TreeStore

app = typer.Typer(help="lychee-notes: a local tree of notes with trash and restore.")

DocId = Annotated[str, typer.Argument(help="Document id")]
JsonFlag = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database file (default: $LYCHEE_DB_PATH or data dir)"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"db_path": db or resolve_database_path()}


@contextmanager
def _open_store(ctx: typer.Context) -> Iterator[TreeStore]:
    """Open the store and turn store errors into ``<kind>: <message>`` with exit 1."""
    db_path: Path = ctx.obj["db_path"]
    logger.debug("Using database {}", db_path)
    try:
        with TreeStore.open(db_path) as store:
            yield store
    except TreeStoreError as e:
        typer.echo(f"{e.kind}: {e}", err=True)
        raise typer.Exit(1) from e


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _label(doc: Document) -> str:
    title = doc.title or "Untitled"
    return f"{doc.emoji} {title}" if doc.emoji else title


def _echo_document(doc: Document) -> None:
    typer.echo(f"{_label(doc)}  [id={doc.id}]")
    typer.echo(f"  parent={doc.parent_id or 'root'}  position={doc.sort_order}")
    typer.echo(f"  created={doc.created_at}  updated={doc.updated_at}")
    if doc.is_trashed:
        typer.echo(f"  trashed={doc.deleted_at}")


def _echo_listing(docs: list[Document], *, trashed: bool = False) -> None:
    noun = "trashed documents" if trashed else "documents"
    typer.echo(f"{len(docs)} {noun}:\n")
    for doc in docs:
        when = f"  trashed {doc.deleted_at}" if trashed else ""
        typer.echo(f"  {_label(doc)}  [id={doc.id}]{when}")


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Max results")] = None,
    offset: Annotated[int | None, typer.Option("--offset", help="Pagination offset")] = None,
    output_json: JsonFlag = False,
) -> None:
    """List live documents by position."""
    with _open_store(ctx) as store:
        docs = store.list(limit=limit, offset=offset)
    if output_json:
        _echo_json([d.to_dict() for d in docs])
    else:
        _echo_listing(docs)


@app.command(name="trash-list")
def trash_list(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Max results")] = None,
    offset: Annotated[int | None, typer.Option("--offset", help="Pagination offset")] = None,
    output_json: JsonFlag = False,
) -> None:
    """List trashed documents, most recently trashed first."""
    with _open_store(ctx) as store:
        docs = store.list_trashed(limit=limit, offset=offset)
    if output_json:
        _echo_json([d.to_dict() for d in docs])
    else:
        _echo_listing(docs, trashed=True)


@app.command()
def get(ctx: typer.Context, doc_id: DocId, output_json: JsonFlag = False) -> None:
    """Show one document, live or trashed."""
    with _open_store(ctx) as store:
        doc = store.get(doc_id)
        if doc is None:
            raise NotFoundError(doc_id)
    if output_json:
        _echo_json(doc.to_dict())
    else:
        _echo_document(doc)
        if doc.content:
            typer.echo(f"  content: {doc.content[:200]}")


@app.command()
def create(
    ctx: typer.Context,
    title: Annotated[str | None, typer.Option("--title", "-t", help="Title")] = None,
    content: Annotated[
        str | None, typer.Option("--content", "-c", help="Editor state JSON")
    ] = None,
    parent: Annotated[
        str | None, typer.Option("--parent", "-p", help="Parent id (default: root level)")
    ] = None,
    emoji: Annotated[str | None, typer.Option("--emoji", "-e", help="Icon")] = None,
    output_json: JsonFlag = False,
) -> None:
    """Create a document as the first child of its parent."""
    with _open_store(ctx) as store:
        doc = store.create(title=title, content=content, parent_id=parent, emoji=emoji)
    if output_json:
        _echo_json(doc.to_dict())
    else:
        typer.echo(f"Created {_label(doc)}  [id={doc.id}]")


@app.command()
def update(
    ctx: typer.Context,
    doc_id: DocId,
    title: Annotated[str | None, typer.Option("--title", "-t", help="New title")] = None,
    content: Annotated[
        str | None, typer.Option("--content", "-c", help="New editor state JSON")
    ] = None,
    emoji: Annotated[str | None, typer.Option("--emoji", "-e", help="New icon")] = None,
    clear_emoji: bool = typer.Option(False, "--clear-emoji", help="Remove the icon"),
    output_json: JsonFlag = False,
) -> None:
    """Change title, content or emoji. Options not given stay as they are."""
    if emoji is not None and clear_emoji:
        typer.echo("ValidationError: --emoji and --clear-emoji are exclusive", err=True)
        raise typer.Exit(1)

    fields: dict[str, Any] = {}
    if title is not None:
        fields["title"] = title
    if content is not None:
        fields["content"] = content
    if emoji is not None:
        fields["emoji"] = emoji
    if clear_emoji:
        fields["emoji"] = None

    with _open_store(ctx) as store:
        doc = store.update(doc_id, DocumentPatch.from_mapping(fields))
    if output_json:
        _echo_json(doc.to_dict())
    else:
        typer.echo(f"Updated {_label(doc)}  [id={doc.id}]")


@app.command()
def trash(ctx: typer.Context, doc_id: DocId, output_json: JsonFlag = False) -> None:
    """Move a document and its subtree to the trash."""
    with _open_store(ctx) as store:
        result = store.trash(doc_id)
    if output_json:
        _echo_json({"document": result.document.to_dict(), "trashed_ids": result.trashed_ids})
    elif not result.trashed_ids:
        typer.echo(f"Already in trash: {_label(result.document)}")
    else:
        typer.echo(f"Trashed {len(result.trashed_ids)} documents")


@app.command()
def restore(ctx: typer.Context, doc_id: DocId, output_json: JsonFlag = False) -> None:
    """Restore a trashed document and what was trashed along with it."""
    with _open_store(ctx) as store:
        result = store.restore(doc_id)
    if output_json:
        _echo_json({"document": result.document.to_dict(), "restored_ids": result.restored_ids})
    elif not result.restored_ids:
        typer.echo(f"Not in trash: {_label(result.document)}")
    else:
        typer.echo(f"Restored {len(result.restored_ids)} documents")


@app.command()
def purge(ctx: typer.Context, doc_id: DocId, output_json: JsonFlag = False) -> None:
    """Permanently delete a document and all of its descendants."""
    with _open_store(ctx) as store:
        deleted_ids = store.permanent_delete(doc_id)
    if output_json:
        _echo_json({"deleted_ids": deleted_ids})
    else:
        typer.echo(f"Deleted {len(deleted_ids)} documents")


@app.command()
def move(
    ctx: typer.Context,
    doc_id: DocId,
    parent: Annotated[
        str | None, typer.Option("--parent", "-p", help="New parent id (default: root level)")
    ] = None,
    position: Annotated[
        int, typer.Option("--position", "-P", help="Position among new siblings, 0 = first")
    ] = 0,
    output_json: JsonFlag = False,
) -> None:
    """Move a document (with its subtree) to a new parent and/or position."""
    with _open_store(ctx) as store:
        doc = store.move(doc_id, parent, position)
    if output_json:
        _echo_json(doc.to_dict())
    else:
        typer.echo(
            f"Moved {_label(doc)} to {doc.parent_id or 'root'} at position {doc.sort_order}"
        )


@app.command()
def tree(
    ctx: typer.Context,
    root_id: Annotated[
        str | None, typer.Argument(help="Render only this subtree")
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    show_ids: bool = typer.Option(False, "--ids", help="Append document ids"),
    output_json: JsonFlag = False,
) -> None:
    """Print the live tree as a markdown outline."""
    with _open_store(ctx) as store:
        if root_id is not None and store.get(root_id) is None:
            raise NotFoundError(root_id)
        md = render_tree_as_markdown(
            store, root_id=root_id, max_depth=max_depth, show_ids=show_ids
        )
    if output_json:
        _echo_json({"content": md})
    elif md:
        typer.echo(md, nl=False)
    else:
        typer.echo("Nothing to show.")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from lychee_notes.mcp.server import run_mcp_server

    run_mcp_server()
