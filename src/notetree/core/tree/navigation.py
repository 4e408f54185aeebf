"""Tree navigation: breadcrumbs and children."""

from notetree.core.tree.index import TreeIndex
from notetree.models.note import Breadcrumb, Note


def get_breadcrumbs(index: TreeIndex, note_id: str) -> tuple[Breadcrumb, ...]:
    """Get ancestor breadcrumbs for a note.

    Returns breadcrumbs in order from the top-level ancestor to the immediate
    parent (excludes the note itself). A broken parent chain stops the walk at
    the last ancestor still present in the index.
    """
    note = index.get(note_id)
    if note is None:
        return ()

    ancestors: list[Note] = []
    seen = {note_id}
    parent_id = note.pid
    while parent_id and parent_id != index.root_id and parent_id not in seen:
        parent = index.get(parent_id)
        if parent is None:
            break
        seen.add(parent_id)
        ancestors.append(parent)
        parent_id = parent.pid

    ancestors.reverse()
    return tuple(
        Breadcrumb(note_id=a.id, title=a.title, depth=depth) for depth, a in enumerate(ancestors)
    )


def get_children(index: TreeIndex, parent_id: str, *, limit: int = 50) -> tuple[Note, ...]:
    """Get direct children of a note (or of the root), in index order."""
    children: list[Note] = []
    for child_id in index.children(parent_id)[:limit]:
        child = index.get(child_id)
        if child is not None:
            children.append(child)
    return tuple(children)
