"""MCP server exposing notetree trash, search and tree tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from notetree.api import NoteApi
from notetree.core.search.searcher import search_notes
from notetree.core.search.view import SearchView
from notetree.core.sync import TreeRefresher
from notetree.core.trash.reconciler import TrashReconciler
from notetree.core.tree.index import TreeIndex
from notetree.core.tree.markdown import render_subtree_as_markdown
from notetree.core.tree.navigation import get_breadcrumbs, get_children
from notetree.errors import NoteTreeError
from notetree.models.note import Note
from notetree.protocols import PersistenceProtocol, TreeSourceProtocol


def _serialize_note(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "pid": note.pid,
        "date": note.date,
    }


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime.

    Each tool call opens its own trash or search view over the shared tree,
    so concurrent calls never see each other's keyword or results.
    """

    index: TreeIndex
    refresher: TreeRefresher
    persistence: PersistenceProtocol

    def open_trash(self) -> TrashReconciler:
        return TrashReconciler(self.index, self.persistence, refresher=self.refresher)

    def open_search(self) -> SearchView:
        return SearchView(self.index, refresher=self.refresher)


def build_context(
    persistence: PersistenceProtocol, source: TreeSourceProtocol
) -> ServerContext:
    """Wire the shared tree and its refresher."""
    index = TreeIndex()
    return ServerContext(
        index=index,
        refresher=TreeRefresher(index, source),
        persistence=persistence,
    )


# --- Core functions (testable without MCP context) ---


async def notetree_list_trash(ctx: ServerContext, *, keyword: str | None = None) -> dict[str, Any]:
    """List deleted notes, optionally filtered by a literal title keyword."""
    keyword = keyword or None
    trash = ctx.open_trash()
    try:
        notes = await trash.filter_notes(keyword) or []
    except NoteTreeError as e:
        return e.to_dict()
    finally:
        trash.close()
    return {
        "keyword": keyword,
        "notes": [_serialize_note(n) for n in notes],
        "count": len(notes),
    }


async def notetree_restore_note(ctx: ServerContext, *, note_id: str) -> dict[str, Any]:
    """Restore a deleted note back into the tree."""
    trash = ctx.open_trash()
    try:
        await ctx.refresher.maybe_refresh()
        note = next((n for n in trash.get_deleted_notes() if n.id == note_id), None)
        if note is None:
            return {"success": False, "error": f"Note '{note_id}' is not in the trash."}
        restored = await trash.restore_note(note)
    except NoteTreeError as e:
        logger.warning("Restore of {} failed: {}", note_id, e.message)
        return {"success": False, **e.to_dict()}
    finally:
        trash.close()
    return {"success": True, "note": _serialize_note(restored)}


async def notetree_delete_note(ctx: ServerContext, *, note_id: str) -> dict[str, Any]:
    """Permanently delete a note."""
    trash = ctx.open_trash()
    try:
        await trash.delete_note(note_id)
    except NoteTreeError as e:
        logger.warning("Delete of {} failed: {}", note_id, e.message)
        return {"success": False, **e.to_dict()}
    finally:
        trash.close()
    return {"success": True, "note_id": note_id}


async def notetree_search(
    ctx: ServerContext,
    *,
    query: str = "",
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Search live notes; title hits rank above body hits."""
    if not query.strip():
        return {"error": "No search query provided.", "results": [], "count": 0, "total": 0}

    limit = max(1, min(limit, 50))
    try:
        await ctx.refresher.maybe_refresh()
    except NoteTreeError as e:
        return e.to_dict()
    results, total = search_notes(ctx.index, query=query, limit=limit, offset=offset)
    serialized = [
        {
            **_serialize_note(r.note),
            "snippet": r.snippet,
            "breadcrumbs": " > ".join(b.title[:40] for b in r.breadcrumbs),
            "score": r.score,
        }
        for r in results
    ]
    output: dict[str, Any] = {"results": serialized, "count": len(serialized), "total": total}
    if offset + len(serialized) < total:
        output["has_more"] = True
        output["next_offset"] = offset + len(serialized)
    return output


async def notetree_filter(ctx: ServerContext, *, keyword: str | None = None) -> dict[str, Any]:
    """Filter live notes by title or content, in tree order."""
    keyword = keyword or None
    view = ctx.open_search()
    try:
        notes = await view.filter(keyword) or []
    except NoteTreeError as e:
        return e.to_dict()
    finally:
        view.close()
    return {
        "keyword": keyword,
        "notes": [_serialize_note(n) for n in notes],
        "count": len(notes),
    }


async def notetree_get_note_context(
    ctx: ServerContext,
    *,
    note_id: str,
    child_limit: int = 20,
) -> dict[str, Any]:
    """Get a note with its body, breadcrumbs and direct children.

    Args:
        note_id: Note ID.
        child_limit: Max direct children to show.
    """
    try:
        await ctx.refresher.maybe_refresh()
    except NoteTreeError as e:
        return e.to_dict()
    note = ctx.index.get(note_id)
    if note is None:
        return {"error": f"Note '{note_id}' not found."}

    children = get_children(ctx.index, note_id, limit=child_limit)
    return {
        "note": {**_serialize_note(note), "content": note.raw_content},
        "in_trash": not ctx.index.is_reachable(note_id),
        "breadcrumbs": " > ".join(b.title[:40] for b in get_breadcrumbs(ctx.index, note_id)),
        "children": [{"id": c.id, "title": c.title[:80]} for c in children],
    }


async def notetree_read_tree(
    ctx: ServerContext,
    *,
    note_id: str | None = None,
    max_depth: int | None = None,
    include_content: bool = False,
) -> dict[str, Any]:
    """Render the live tree (or one subtree) as markdown."""
    try:
        await ctx.refresher.maybe_refresh()
    except NoteTreeError as e:
        return e.to_dict()
    start = note_id or ctx.index.root_id
    md = render_subtree_as_markdown(
        ctx.index, note_id=start, max_depth=max_depth, include_content=include_content
    )
    if not md and note_id:
        return {"error": f"Note '{note_id}' not found."}
    return {"note_id": start, "content": md}


# --- MCP Server Setup ---


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the tree on startup; tools retry the load if the server was unreachable."""
    api = NoteApi()
    ctx = build_context(api, api)
    try:
        await ctx.refresher.maybe_refresh()
    except NoteTreeError as e:
        logger.warning("Initial tree load failed: {}", e.message)
    yield ctx


mcp_server = FastMCP(
    "notetree",
    instructions="""\
Notes are organised as a tree. Deleted notes sit in the trash until they are
restored or permanently deleted.

- notetree_search_tool finds live notes by a literal, case-sensitive keyword.
- notetree_list_trash_tool lists deleted notes; restore them with
  notetree_restore_note_tool. A note whose parent is also deleted is
  restored at the top level.
- notetree_get_note_context_tool shows a note with its ancestors and children.
- notetree_delete_note_tool cannot be undone.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[no-any-return]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def notetree_list_trash_tool(ctx: Context, keyword: str | None = None) -> dict[str, Any]:
    """List notes in the trash.

    Args:
        keyword: Only notes whose title contains this literal text.
    """
    return await notetree_list_trash(_ctx(ctx), keyword=keyword)


@mcp_server.tool()
async def notetree_restore_note_tool(ctx: Context, note_id: str) -> dict[str, Any]:
    """Restore a note from the trash.

    Args:
        note_id: ID of a note currently in the trash.
    """
    return await notetree_restore_note(_ctx(ctx), note_id=note_id)


@mcp_server.tool()
async def notetree_delete_note_tool(ctx: Context, note_id: str) -> dict[str, Any]:
    """Permanently delete a note. This cannot be undone.

    Args:
        note_id: ID of the note to delete.
    """
    return await notetree_delete_note(_ctx(ctx), note_id=note_id)


@mcp_server.tool()
async def notetree_search_tool(
    ctx: Context,
    query: str,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Search live notes by title and content.

    Pagination: When has_more is true, use next_offset in a follow-up call.

    Args:
        query: Literal, case-sensitive keyword.
        limit: Max results (1-50, default 20).
        offset: Pagination offset.
    """
    return await notetree_search(_ctx(ctx), query=query, limit=limit, offset=offset)


@mcp_server.tool()
async def notetree_filter_tool(ctx: Context, keyword: str | None = None) -> dict[str, Any]:
    """List live notes whose title or content contains a keyword, in tree order.

    Args:
        keyword: Literal, case-sensitive keyword. Omit to list every live note.
    """
    return await notetree_filter(_ctx(ctx), keyword=keyword)


@mcp_server.tool()
async def notetree_get_note_context_tool(
    ctx: Context,
    note_id: str,
    child_limit: int = 20,
) -> dict[str, Any]:
    """Get a note with its surrounding context.

    Returns the note body, its breadcrumbs (ancestors), its direct children
    and whether it is in the trash. Use this after search or list trash.

    Args:
        note_id: Note ID from search or trash results.
        child_limit: Max direct children to show.
    """
    return await notetree_get_note_context(_ctx(ctx), note_id=note_id, child_limit=child_limit)


@mcp_server.tool()
async def notetree_read_tree_tool(
    ctx: Context,
    note_id: str | None = None,
    max_depth: int | None = None,
    include_content: bool = False,
) -> dict[str, Any]:
    """Read the note tree (or one subtree) as a markdown outline.

    Args:
        note_id: Start note (default: the whole tree).
        max_depth: Max depth levels (None = unlimited).
        include_content: Include note bodies.
    """
    return await notetree_read_tree(
        _ctx(ctx), note_id=note_id, max_depth=max_depth, include_content=include_content
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from notetree.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
