"""Trash view: the deleted set, keyword filtering, restore and permanent delete.

A note is deleted when it is not reachable from the root. Restoring it is a
two-phase operation: ``plan_restore`` decides the new parent, the server is
told, and only once it confirms does ``apply_restore`` touch the index.
"""

from dataclasses import replace

from loguru import logger

from notetree.config import ROOT_ID
from notetree.core.search.searcher import filter_notes
from notetree.core.sync import TreeRefresher
from notetree.core.tree.index import TreeIndex
from notetree.models.note import Note, RestorePlan
from notetree.protocols import PersistenceProtocol


class TrashReconciler:
    """Deleted-notes state of one open trash view.

    Reads always go through to the live ``index``. Create one per open view
    and ``close()`` it when the view goes away; completions arriving after
    that are discarded.
    """

    def __init__(
        self,
        index: TreeIndex,
        persistence: PersistenceProtocol,
        *,
        refresher: TreeRefresher | None = None,
    ) -> None:
        self._index = index
        self._persistence = persistence
        self._refresher = refresher
        self._generation = 0
        self._closed = False
        self.keyword: str | None = None
        self.filter_data: list[Note] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def get_deleted_notes(self) -> list[Note]:
        return self._index.get_unused_items()

    async def filter_notes(self, keyword: str | None = None) -> list[Note] | None:
        """Filter the deleted notes by title and store keyword and result.

        Only the most recently issued call stores its result; earlier calls
        completing later are dropped.

        Raises:
            NoteTreeError: The tree has never loaded and loading it failed.
        """
        self._generation += 1
        generation = self._generation

        if self._refresher is not None:
            await self._refresher.maybe_refresh()

        if self._closed or generation != self._generation:
            logger.debug("Discarding stale trash filter result for {!r}", keyword)
            return self.filter_data

        self.keyword = keyword
        self.filter_data = filter_notes(self.get_deleted_notes(), keyword)
        return self.filter_data

    def plan_restore(self, note: Note) -> RestorePlan:
        """Decide where ``note`` goes back to.

        Its own parent is kept only if that parent is a note in the index
        which is not itself deleted; otherwise the note goes under the root.
        """
        parent_id = note.pid
        if (
            not parent_id
            or parent_id == ROOT_ID
            or parent_id not in self._index
            or parent_id in {n.id for n in self.get_deleted_notes()}
        ):
            parent_id = ROOT_ID
        return RestorePlan(note=note, parent_id=parent_id)

    async def restore_note(self, note: Note) -> Note:
        """Restore ``note`` on the server, then in the local tree.

        Raises:
            NotFoundError: The server does not know the note.
            TransportError: The round trip failed; the local tree is untouched.
        """
        plan = self.plan_restore(note)
        logger.debug("Restoring {!r} under {!r}", note.id, plan.parent_id)
        await self._persistence.post("restore", plan.payload())
        return self.apply_restore(plan)

    def apply_restore(self, plan: RestorePlan) -> Note:
        """Apply a server-confirmed restore to the local tree."""
        restored = replace(plan.note, pid=plan.parent_id)
        if self._closed:
            logger.debug("Trash view closed, not applying restore of {!r}", plan.note.id)
            return restored

        self._index.restore_item(plan.note.id, plan.parent_id)
        if self.filter_data is not None:
            self.filter_data = filter_notes(self.get_deleted_notes(), self.keyword)
        logger.info("Restored note {} under {}", plan.note.id, plan.parent_id)
        return self._index.get(plan.note.id) or restored

    async def delete_note(self, note_id: str) -> None:
        """Permanently delete a note on the server.

        The local tree learns about it through the next refresh.
        """
        await self._persistence.post("delete", {"id": note_id})
        logger.info("Deleted note {} permanently", note_id)

    def close(self) -> None:
        self._closed = True
        self.keyword = None
        self.filter_data = None
