"""Fake collaborators for testing the note tree core."""

import asyncio
import copy
from typing import Any

from notetree.models.note import Note

LIVE_NOTES = [
    Note(
        id="work",
        title="Work",
        raw_content="quarterly plan",
        pid="root",
        date="2024-01-01T09:00:00.000Z",
    ),
    Note(id="home", title="Home", raw_content="", pid="root", date="2024-01-02T09:00:00.000Z"),
    Note(
        id="plan",
        title="Plan (draft)",
        raw_content="ship v2.0 by friday",
        pid="work",
        date="2024-01-03T09:00:00.000Z",
    ),
]

TRASHED_NOTES = [
    # Detached from the tree: the note itself was deleted.
    Note(id="a", title="Archive", raw_content="old stuff", pid=None),
    # Still under "a", so deleted along with it.
    Note(id="b", title="Archive notes", raw_content="child of a", pid="a"),
    # Parent was permanently deleted.
    Note(id="c", title="Recipes", raw_content="pancakes", pid="gone"),
]

TREE_PAYLOAD: dict[str, Any] = {
    "rootId": "root",
    "items": {
        "root": {"id": "root", "children": ["work", "home"]},
        "work": {
            "id": "work",
            "children": ["plan"],
            "data": {
                "id": "work",
                "title": "Work",
                "rawContent": "quarterly plan",
                "pid": "root",
                "date": "2024-01-01T09:00:00.000Z",
            },
        },
        "home": {
            "id": "home",
            "children": [],
            "data": {"id": "home", "title": "Home", "pid": "root"},
        },
        "plan": {
            "id": "plan",
            "children": [],
            "data": {
                "id": "plan",
                "title": "Plan (draft)",
                "rawContent": "ship v2.0 by friday",
                "pid": "work",
            },
        },
        # Nobody lists "a" any more: it was deleted. It keeps its stored pid.
        "a": {
            "id": "a",
            "children": ["b"],
            "data": {"id": "a", "title": "Archive", "rawContent": "old stuff", "pid": "root"},
        },
        "b": {
            "id": "b",
            "children": [],
            "data": {"id": "b", "title": "Archive notes", "rawContent": "child of a", "pid": "a"},
        },
    },
}


# Deleted on its own: nobody lists it, but its stored parent is still live.
DRAFT_ITEM: dict[str, Any] = {
    "id": "d",
    "children": [],
    "data": {"id": "d", "title": "Draft", "rawContent": "unsent", "pid": "work"},
}


def payload_with(*items: dict[str, Any]) -> dict[str, Any]:
    """Copy of TREE_PAYLOAD with extra items added."""
    payload = copy.deepcopy(TREE_PAYLOAD)
    for item in items:
        payload["items"][item["id"]] = item
    return payload


class FakePersistence:
    """In-memory fake for the persistence channel.

    Records all calls for assertions. Per-note gates hold a request open
    until the test releases it; per-note errors make it fail.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.errors: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}

    async def post(self, action: str, data: dict[str, Any]) -> dict[str, Any]:
        """Record the call, wait for its gate if any, then succeed or raise."""
        self.calls.append((action, dict(data)))
        gate = self.gates.get(data["id"])
        if gate is not None:
            await gate.wait()
        error = self.errors.get(data["id"])
        if error is not None:
            raise error
        return {}


class FakeTreeSource:
    """In-memory fake for the tree refresh collaborator."""

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self.payload: dict[str, Any] = payload or {"rootId": "root", "items": {}}
        self.fetch_count = 0
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def fetch_tree(self) -> dict[str, Any]:
        """Return a copy of the stored payload."""
        self.fetch_count += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)


class FakeNoteApi(FakePersistence, FakeTreeSource):
    """Fake for NoteApi: both persistence channel and tree source."""

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        FakePersistence.__init__(self)
        FakeTreeSource.__init__(self, payload)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now
