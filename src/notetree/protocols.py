"""Protocols for the collaborators the note tree core depends on."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PersistenceProtocol(Protocol):
    """Protocol for the persistence channel that stores note mutations."""

    async def post(self, action: str, data: dict[str, Any]) -> dict[str, Any]:
        """Send a mutation (``"restore"`` or ``"delete"``) and return the response."""
        ...


@runtime_checkable
class TreeSourceProtocol(Protocol):
    """Protocol for the collaborator that supplies the authoritative tree."""

    async def fetch_tree(self) -> dict[str, Any]:
        """Fetch the current tree payload."""
        ...
