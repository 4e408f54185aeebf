"""Domain models for the note tree."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Note:
    """A single note. ``pid`` is the parent note id or the root sentinel."""

    id: str
    title: str = ""
    raw_content: str = ""
    pid: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class RestorePlan:
    """A restore that has been decided but not yet confirmed by the server."""

    note: Note
    parent_id: str

    def payload(self) -> dict[str, str]:
        """Wire payload for the ``restore`` action."""
        return {"id": self.note.id, "parentId": self.parent_id}


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    note_id: str
    title: str
    depth: int


@dataclass(frozen=True)
class SearchResult:
    """A search hit with context."""

    note: Note
    snippet: str
    breadcrumbs: tuple[Breadcrumb, ...] = ()
    score: float = 0.0
