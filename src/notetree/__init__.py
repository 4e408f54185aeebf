"""Hierarchical note store: tree index, trash reconciliation and keyword search."""

from notetree.api import NoteApi
from notetree.core.search.searcher import filter_notes, matches, search_notes
from notetree.core.search.view import SearchView
from notetree.core.sync import TreeRefresher
from notetree.core.trash.reconciler import TrashReconciler
from notetree.core.tree.index import TreeIndex, get_unused_items
from notetree.errors import NoteTreeError, NotFoundError, TransportError
from notetree.models.note import Note, RestorePlan
from notetree.protocols import PersistenceProtocol, TreeSourceProtocol

__all__ = [
    "Note",
    "NoteApi",
    "NoteTreeError",
    "NotFoundError",
    "PersistenceProtocol",
    "RestorePlan",
    "SearchView",
    "TransportError",
    "TrashReconciler",
    "TreeIndex",
    "TreeRefresher",
    "TreeSourceProtocol",
    "filter_notes",
    "get_unused_items",
    "matches",
    "search_notes",
]
