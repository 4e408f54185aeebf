"""Render the live note tree as markdown."""

import io

from notetree.config import ROOT_ID
from notetree.core.tree.index import TreeIndex


def render_subtree_as_markdown(
    index: TreeIndex,
    *,
    note_id: str = ROOT_ID,
    max_depth: int | None = None,
    include_content: bool = False,
) -> str:
    """Render a note and its descendants as indented markdown.

    Args:
        index: The tree to render from.
        note_id: The note to start from. The root sentinel renders every
            top-level note without a heading line for the root itself.
        max_depth: Max levels below the start note to include (None = unlimited).
        include_content: Whether to include each note's body.

    Returns:
        Markdown string with bullet-list hierarchy, or "" when the note is unknown.
    """
    if note_id == index.root_id:
        todo = [(child_id, 0) for child_id in index.children(note_id)]
        max_absolute_depth = max_depth - 1 if max_depth is not None else None
    elif note_id in index:
        todo = [(note_id, 0)]
        max_absolute_depth = max_depth
    else:
        return ""

    out = io.StringIO()
    seen: set[str] = set()
    while todo:
        current_id, depth = todo.pop(0)
        note = index.get(current_id)
        if note is None or current_id in seen:
            continue
        seen.add(current_id)
        indent = "    " * depth

        # Write title lines
        lines = (note.title or "(untitled)").split("\n")
        out.write(f"{indent}- {lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if include_content and note.raw_content:
            for content_line in note.raw_content.split("\n"):
                out.write(f"{indent}  > {content_line}\n")

        child_ids = index.children(current_id)
        if max_absolute_depth is not None and depth >= max_absolute_depth:
            # Truncation indicator when children are cut off by max_depth
            if child_ids:
                child_indent = "    " * (depth + 1)
                noun = "child" if len(child_ids) == 1 else "children"
                out.write(f"{child_indent}- ... ({len(child_ids)} more {noun}, id={current_id})\n")
            continue

        todo = [(child_id, depth + 1) for child_id in child_ids] + todo

    return out.getvalue()
