"""Exceptions raised by notetree operations.

Every failure is scoped to the single operation that produced it and is
reported to the caller; nothing here is fatal to the process.
"""

from typing import Any


class NoteTreeError(Exception):
    """Base exception for all notetree errors.

    Attributes:
        message: Human-readable error message.
        note_id: The note the failed operation targeted, if any.
        status_code: HTTP status reported by the server, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        note_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.note_id = note_id
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for tool responses."""
        data: dict[str, Any] = {"error": self.__class__.__name__, "message": self.message}
        if self.note_id is not None:
            data["note_id"] = self.note_id
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class NotFoundError(NoteTreeError):
    """The server does not know the targeted note. Recoverable: the caller may retry."""


class TransportError(NoteTreeError):
    """The round trip to the server failed (network error or error response)."""
