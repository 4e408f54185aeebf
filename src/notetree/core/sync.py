"""Refresh the in-memory tree from the authoritative tree source."""

import asyncio
import time
from collections.abc import Callable

from loguru import logger

from notetree.config import REFRESH_INTERVAL
from notetree.core.importer.json_reader import parse_tree_children, parse_tree_data
from notetree.core.tree.index import TreeIndex
from notetree.errors import NoteTreeError
from notetree.protocols import TreeSourceProtocol


class TreeRefresher:
    """Pull the current tree from ``source`` into ``index``.

    Reads trigger ``maybe_refresh()``, which only hits the source once the
    cooldown has expired. Concurrent callers share a single refresh.
    """

    def __init__(
        self,
        index: TreeIndex,
        source: TreeSourceProtocol,
        *,
        interval: float = REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.index = index
        self.source = source
        self.interval = interval
        self._clock = clock
        self._lock = asyncio.Lock()
        self.last_refresh_at: float | None = None

    def is_refresh_needed(self) -> bool:
        """Check if the tree should be refetched based on the interval."""
        if self.last_refresh_at is None:
            return True
        return (self._clock() - self.last_refresh_at) >= self.interval

    async def refresh(self) -> None:
        """Fetch the tree and replace the index contents. Errors propagate."""
        payload = await self.source.fetch_tree()
        notes = parse_tree_data(payload)
        self.index.replace(notes, children=parse_tree_children(payload))
        self.last_refresh_at = self._clock()
        logger.info("Refreshed tree: {} notes", len(notes))

    async def maybe_refresh(self) -> None:
        """Refresh if the cooldown has expired.

        If the tree has never loaded, a failure propagates: there is no tree
        to fall back on. Later failures log a warning, keep the existing tree
        and still set the cooldown to prevent retry storms.

        Raises:
            NoteTreeError: The first load failed.
        """
        async with self._lock:
            if not self.is_refresh_needed():
                return
            loaded = self.last_refresh_at is not None
            try:
                await self.refresh()
            except NoteTreeError:
                if not loaded:
                    raise
                logger.opt(exception=True).warning(
                    "Tree refresh failed, continuing with existing tree"
                )
                self.last_refresh_at = self._clock()
