"""Shared test fixtures."""

import pytest

from notetree.core.tree.index import TreeIndex
from tests.unit.fakes import LIVE_NOTES, TRASHED_NOTES


@pytest.fixture
def index() -> TreeIndex:
    """Return a tree with three live notes and three notes in the trash."""
    return TreeIndex([*LIVE_NOTES, *TRASHED_NOTES])
