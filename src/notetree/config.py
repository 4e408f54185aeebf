"""Configuration constants for notetree."""

import os
from pathlib import Path

# Reserved parent id meaning "attached at top level".
ROOT_ID = "root"

# Server location. NOTETREE_API_URL wins over the default.
DEFAULT_API_URL = "http://localhost:3000"

TRASH_ENDPOINT = "/api/trash"
TREE_ENDPOINT = "/api/tree"

# API token location. NOTETREE_TOKEN wins, otherwise the first file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/notetree-token.txt").expanduser(),
    Path("~/.config/secret/notetree-token.txt").expanduser(),
]

# Seconds.
REQUEST_TIMEOUT: float = 30.0

# Minimum seconds between two tree refreshes triggered by reads.
REFRESH_INTERVAL: int = 30


def resolve_api_url() -> str:
    """Return the server base URL, without a trailing slash."""
    return os.environ.get("NOTETREE_API_URL", DEFAULT_API_URL).rstrip("/")


def read_api_token() -> str | None:
    """Return the API token, or None when the server runs without auth."""
    token = os.environ.get("NOTETREE_TOKEN")
    if token:
        return token.strip()
    for token_path in API_TOKEN_FILES:
        try:
            return token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            pass
    return None
