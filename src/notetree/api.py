"""HTTP client for the note server: trash mutations and tree reads."""

import asyncio
from typing import Any

import requests
from loguru import logger

from notetree.config import (
    REQUEST_TIMEOUT,
    TRASH_ENDPOINT,
    TREE_ENDPOINT,
    read_api_token,
    resolve_api_url,
)
from notetree.errors import NotFoundError, TransportError


class NoteApi:
    """Encapsulated note server API.

    Nothing is cached: every call reaches the server.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = (base_url or resolve_api_url()).rstrip("/")
        self.timeout = timeout
        self.sess = requests.Session()
        self.sess.headers.update({"Cache-Control": "no-cache", "Pragma": "no-cache"})

        api_token = token if token is not None else read_api_token()
        if api_token:
            self.sess.headers["Authorization"] = f"Bearer {api_token}"

        logger.debug("API ready: base_url {!r}, token {}", self.base_url, bool(api_token))

    def call(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Invoke a server endpoint, return the decoded JSON body (None if empty)."""
        logger.debug("Making request: {} {!r} {}", method, path, repr(payload)[:32])
        note_id = payload.get("data", {}).get("id") if payload else None

        try:
            r = self.sess.request(
                method, f"{self.base_url}{path}", json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            msg = f"Request failed: {method} {path}: {e}"
            raise TransportError(msg, note_id=note_id) from e

        if r.status_code == 404:
            msg = f"Not found: {method} {path} ({r.text[:200]!r})"
            raise NotFoundError(msg, note_id=note_id, status_code=r.status_code)
        if not r.ok:
            msg = f"API call failed: {method} {path} -> {r.status_code} ({r.text[:200]!r})"
            raise TransportError(msg, note_id=note_id, status_code=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            msg = f"Bad JSON from {method} {path}"
            raise TransportError(msg, note_id=note_id, status_code=r.status_code) from e

    async def post(self, action: str, data: dict[str, Any]) -> dict[str, Any]:
        """Send a trash mutation without blocking the event loop."""
        rv = await asyncio.to_thread(
            self.call, "POST", TRASH_ENDPOINT, {"action": action, "data": data}
        )
        return rv if isinstance(rv, dict) else {}

    async def fetch_tree(self) -> dict[str, Any]:
        """Fetch the authoritative tree without blocking the event loop."""
        rv = await asyncio.to_thread(self.call, "GET", TREE_ENDPOINT)
        if not isinstance(rv, dict):
            msg = f"Unexpected tree payload: {type(rv).__name__}"
            raise TransportError(msg)
        return rv
