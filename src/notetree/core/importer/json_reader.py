"""Parse tree payloads from the server into note records."""

from collections import deque
from typing import Any

from loguru import logger

from notetree.config import ROOT_ID
from notetree.models.note import Note


def parse_note(raw: dict[str, Any], *, pid: str | None) -> Note:
    """Build a Note from a raw note dict, with the parent id already resolved."""
    raw_content = raw.get("rawContent")
    if raw_content is None:
        raw_content = raw.get("content", "")
    return Note(
        id=str(raw["id"]),
        title=raw.get("title") or "",
        raw_content=raw_content or "",
        pid=pid,
        date=raw.get("date"),
    )


def _parent_claims(data: dict[str, Any]) -> list[tuple[str, str, str | None]]:
    """(child, parent, conflicting parent) for every child-list entry, in payload order."""
    root_id = data.get("rootId", ROOT_ID)
    claims: list[tuple[str, str, str | None]] = []
    parent_of: dict[str, str] = {}
    for item_id, item in data.get("items", {}).items():
        parent_id = ROOT_ID if item_id == root_id else item_id
        for child_id in item.get("children", ()):
            claims.append((child_id, parent_id, parent_of.get(child_id)))
            parent_of.setdefault(child_id, parent_id)
    return claims


def parse_tree_children(data: dict[str, Any]) -> dict[str, list[str]]:
    """Map each parent id to its ordered child ids, as listed by the payload.

    The root item is keyed by the root sentinel. A child listed under two
    parents keeps the first claim; the conflict is logged.
    """
    children: dict[str, list[str]] = {}
    for child_id, parent_id, earlier in _parent_claims(data):
        if earlier is not None:
            logger.warning(
                "Note {!r} listed under both {!r} and {!r}, keeping the first",
                child_id, earlier, parent_id,
            )
            continue
        children.setdefault(parent_id, []).append(child_id)
    return children


def parse_tree_data(data: dict[str, Any]) -> list[Note]:
    """Parse a tree payload into a list of Notes.

    The payload looks like ``{"rootId": "root", "items": {id: {"id": ...,
    "children": [...], "data": {...}}}}``. A listed note's ``pid`` is the
    item that lists it. An item that nobody lists was detached; it keeps
    the ``pid`` stored in its data, which is where a restore sends it back.

    Args:
        data: Raw tree payload (as from the tree endpoint).

    Returns:
        Notes in display order (breadth-first from the root), followed by
        the detached notes in payload order. Items without a ``data``
        payload are skipped.
    """
    root_id = data.get("rootId", ROOT_ID)
    items: dict[str, dict[str, Any]] = data.get("items", {})

    parent_of: dict[str, str] = {}
    for child_id, parent_id, earlier in _parent_claims(data):
        if earlier is None:
            parent_of[child_id] = parent_id

    # BFS from the root so the live tree comes out in display order.
    order: list[str] = []
    seen = {root_id}
    todo: deque[str] = deque(items.get(root_id, {}).get("children", ()))
    while todo:
        item_id = todo.popleft()
        if item_id in seen or item_id not in items:
            continue
        seen.add(item_id)
        order.append(item_id)
        todo.extend(items[item_id].get("children", ()))
    order.extend(item_id for item_id in items if item_id not in seen)

    result: list[Note] = []
    for item_id in order:
        raw = items[item_id].get("data")
        if not raw:
            logger.debug("Skipping tree item {!r}: no note data", item_id)
            continue
        pid = parent_of.get(item_id, raw.get("pid"))
        result.append(parse_note({**raw, "id": item_id}, pid=pid))

    return result
