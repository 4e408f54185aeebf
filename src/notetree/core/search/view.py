"""Stateful global search over the live (non-deleted) notes."""

from loguru import logger

from notetree.core.search.searcher import filter_notes
from notetree.core.sync import TreeRefresher
from notetree.core.tree.index import TreeIndex
from notetree.models.note import Note

SEARCH_FIELDS = ("title", "raw_content")


class SearchView:
    """Keyword and filtered result of one open search view.

    Create one per open view and ``close()`` it when the view goes away.
    """

    def __init__(self, index: TreeIndex, *, refresher: TreeRefresher | None = None) -> None:
        self._index = index
        self._refresher = refresher
        self._generation = 0
        self._closed = False
        self.keyword: str | None = None
        self.filter_data: list[Note] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def filter(self, keyword: str | None = None) -> list[Note] | None:
        """Filter live notes by title or body; only the newest call stores its result."""
        self._generation += 1
        generation = self._generation

        if self._refresher is not None:
            await self._refresher.maybe_refresh()

        if self._closed or generation != self._generation:
            logger.debug("Discarding stale search result for {!r}", keyword)
            return self.filter_data

        self.keyword = keyword
        self.filter_data = filter_notes(self._index.live_notes(), keyword, fields=SEARCH_FIELDS)
        return self.filter_data

    def close(self) -> None:
        self._closed = True
        self.keyword = None
        self.filter_data = None
