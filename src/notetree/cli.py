"""CLI for notetree (trash, restore, search, tree, MCP server)."""

import asyncio
import json
from collections.abc import Coroutine
from dataclasses import asdict
from typing import Annotated, Any, TypeVar

import typer
from loguru import logger

from notetree.api import NoteApi
from notetree.core.search.searcher import highlight, search_notes
from notetree.core.sync import TreeRefresher
from notetree.core.trash.reconciler import TrashReconciler
from notetree.core.tree.index import TreeIndex
from notetree.core.tree.markdown import render_subtree_as_markdown
from notetree.errors import NoteTreeError
from notetree.logging_config import configure_logging
from notetree.models.note import Note

T = TypeVar("T")

app = typer.Typer(help="notetree: browse, search and restore your notes.")

ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", "-u", help="Note server URL (default: $NOTETREE_API_URL)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning notetree errors into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except NoteTreeError as e:
        logger.error("{}", e.message)
        raise typer.Exit(1) from e


async def _load_tree(api: NoteApi) -> TreeIndex:
    index = TreeIndex()
    await TreeRefresher(index, api).refresh()
    return index


def _styled(text: str, keyword: str | None) -> str:
    return "".join(
        typer.style(segment, bold=True) if matched else segment
        for segment, matched in highlight(text, keyword)
    )


@app.command()
def trash(
    keyword: Annotated[
        str | None, typer.Argument(help="Only show notes whose title contains this")
    ] = None,
    api_url: ApiUrlOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List notes in the trash."""
    api = NoteApi(api_url)

    async def run() -> list[Note]:
        reconciler = TrashReconciler(await _load_tree(api), api)
        try:
            return await reconciler.filter_notes(keyword) or []
        finally:
            reconciler.close()

    notes = _run(run())

    if output_json:
        typer.echo(json.dumps({"notes": [asdict(n) for n in notes], "count": len(notes)}, indent=2))
        return

    typer.echo(f"{len(notes)} notes in trash:\n")
    for note in notes:
        typer.echo(f"  {_styled(note.title or '(untitled)', keyword)}")
        typer.echo(f"    id={note.id}  date={note.date or '-'}")


@app.command()
def restore(
    note_id: str = typer.Argument(..., help="Note ID to restore"),
    api_url: ApiUrlOption = None,
) -> None:
    """Move a note out of the trash, back into the tree."""
    api = NoteApi(api_url)

    async def run() -> Note | None:
        index = await _load_tree(api)
        reconciler = TrashReconciler(index, api)
        try:
            note = next((n for n in reconciler.get_deleted_notes() if n.id == note_id), None)
            if note is None:
                return None
            return await reconciler.restore_note(note)
        finally:
            reconciler.close()

    restored = _run(run())
    if restored is None:
        typer.echo(f"Note '{note_id}' is not in the trash.")
        raise typer.Exit(1)
    typer.echo(f"Restored '{restored.title}' under {restored.pid}")


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="Note ID to delete permanently"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    api_url: ApiUrlOption = None,
) -> None:
    """Permanently delete a note from the trash."""
    if not yes:
        typer.confirm(f"Permanently delete note '{note_id}'?", abort=True)

    api = NoteApi(api_url)
    reconciler = TrashReconciler(TreeIndex(), api)
    try:
        _run(reconciler.delete_note(note_id))
    finally:
        reconciler.close()
    typer.echo(f"Deleted note '{note_id}'.")


@app.command()
def search(
    query: str = typer.Argument(..., help="Keyword (literal, case-sensitive)"),
    limit: int = typer.Option(10, "--limit", "-n", help="Max results"),
    api_url: ApiUrlOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search live notes by title and content."""
    api = NoteApi(api_url)
    index = _run(_load_tree(api))
    results, total = search_notes(index, query=query, limit=limit)

    if output_json:
        data = {
            "results": [
                {
                    "note_id": r.note.id,
                    "title": r.note.title,
                    "snippet": r.snippet,
                    "breadcrumbs": [b.title for b in r.breadcrumbs],
                    "date": r.note.date,
                }
                for r in results
            ],
            "total": total,
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Found {total} results (showing {len(results)}):\n")
    for r in results:
        typer.echo(f"  {_styled(r.note.title or '(untitled)', query)}")
        if r.breadcrumbs:
            typer.echo(f"    in: {' > '.join(b.title[:40] for b in r.breadcrumbs)}")
        if r.note.raw_content:
            typer.echo(f"    {r.snippet}")
        typer.echo(f"    id={r.note.id}")
        typer.echo()


@app.command()
def tree(
    note_id: Annotated[
        str | None, typer.Argument(help="Start from this note (default: everything)")
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    content: bool = typer.Option(False, "--content", "-c", help="Include note bodies"),
    api_url: ApiUrlOption = None,
) -> None:
    """Print the live note tree as markdown."""
    api = NoteApi(api_url)
    index = _run(_load_tree(api))
    md = render_subtree_as_markdown(
        index,
        note_id=note_id or index.root_id,
        max_depth=max_depth,
        include_content=content,
    )
    if md:
        typer.echo(md)
    elif note_id:
        typer.echo(f"Note '{note_id}' not found.")
        raise typer.Exit(1)
    else:
        typer.echo("The tree is empty.")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from notetree.mcp.server import run_mcp_server

    run_mcp_server()
