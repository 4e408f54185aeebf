"""In-memory tree index: id -> note record, with derived child lists.

By default the parent relation lives only in each note's ``pid`` and child
lists are derived from it. A refresh from the server may instead hand over
the server's own child lists; those then decide reachability, and a note's
``pid`` only records where it was last attached. Derived data is dropped
whenever the index mutates.
"""

from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import replace

from loguru import logger

from notetree.config import ROOT_ID
from notetree.models.note import Note


class TreeIndex:
    """Mapping of note id to record, plus derived reachability queries."""

    def __init__(
        self,
        notes: Iterable[Note] = (),
        *,
        root_id: str = ROOT_ID,
        children: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self.root_id = root_id
        self._records: dict[str, Note] = {}
        # Server-supplied child lists; None means derive them from pid.
        self._listed: dict[str, list[str]] | None = None
        # Bumped on every mutation; derived data is only valid for one version.
        self.version = 0
        self._children: dict[str, list[str]] | None = None
        self._reachable: set[str] | None = None
        self._unused: list[Note] | None = None
        self.replace(notes, children=children)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._records.values()))

    @property
    def notes(self) -> list[Note]:
        """All records in index order."""
        return list(self._records.values())

    def get(self, note_id: str) -> Note | None:
        return self._records.get(note_id)

    def replace(
        self,
        notes: Iterable[Note],
        *,
        children: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        """Swap in a fresh record set, as delivered by the refresh collaborator.

        ``children`` maps a parent id to its ordered child ids. When given, it
        replaces the pid-derived child lists until the next ``replace``.
        """
        records: dict[str, Note] = {}
        for note in notes:
            if note.id == self.root_id:
                logger.warning("Ignoring note whose id is the root sentinel {!r}", note.id)
                continue
            if note.id in records:
                logger.warning("Duplicate note id {!r} in tree, keeping the last record", note.id)
            records[note.id] = note
        self._records = records
        self._listed = (
            {parent_id: list(ids) for parent_id, ids in children.items()}
            if children is not None
            else None
        )
        self._invalidate()
        logger.debug("Tree index loaded {} notes (version {})", len(records), self.version)

    def restore_item(self, note_id: str, new_parent_id: str) -> None:
        """Re-attach a note (and with it, its subtree) under ``new_parent_id``."""
        note = self._records.get(note_id)
        if note is None:
            logger.debug("restore_item: note {!r} not in index, nothing to do", note_id)
            return
        self._records[note_id] = replace(note, pid=new_parent_id)
        if self._listed is not None:
            for ids in self._listed.values():
                if note_id in ids:
                    ids.remove(note_id)
            self._listed.setdefault(new_parent_id, []).append(note_id)
        self._invalidate()

    def children(self, parent_id: str) -> tuple[str, ...]:
        """Ids of the direct children of ``parent_id``, in order."""
        return tuple(self._child_map().get(parent_id, ()))

    def reachable_ids(self) -> set[str]:
        """Ids reachable from the root by following parent links downwards."""
        if self._reachable is None:
            child_map = self._child_map()
            seen: set[str] = set()
            todo: deque[str] = deque(child_map.get(self.root_id, ()))
            # Each id is expanded at most once, so cycles cannot keep us here.
            while todo:
                note_id = todo.popleft()
                if note_id in seen or note_id not in self._records:
                    continue
                seen.add(note_id)
                todo.extend(child_map.get(note_id, ()))
            self._reachable = seen
        return set(self._reachable)

    def is_reachable(self, note_id: str) -> bool:
        return note_id in self.reachable_ids()

    def live_notes(self) -> list[Note]:
        """Records reachable from the root, in index order."""
        reachable = self.reachable_ids()
        return [note for note in self._records.values() if note.id in reachable]

    def get_unused_items(self) -> list[Note]:
        """Records not reachable from the root, directly or transitively, in index order."""
        if self._unused is None:
            reachable = self.reachable_ids()
            self._unused = [
                note for note in self._records.values() if note.id not in reachable
            ]
        return list(self._unused)

    def _child_map(self) -> dict[str, list[str]]:
        if self._listed is not None:
            return self._listed
        if self._children is None:
            child_map: dict[str, list[str]] = {}
            for note in self._records.values():
                if note.pid:
                    child_map.setdefault(note.pid, []).append(note.id)
            self._children = child_map
        return self._children

    def _invalidate(self) -> None:
        self.version += 1
        self._children = None
        self._reachable = None
        self._unused = None


def get_unused_items(tree: TreeIndex) -> list[Note]:
    """Return every note of ``tree`` that is unreachable from its root."""
    return tree.get_unused_items()
