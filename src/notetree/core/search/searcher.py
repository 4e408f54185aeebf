"""Keyword search over note titles and bodies.

Keywords are literal substrings: characters such as ``.``, ``*`` or ``(``
carry no pattern meaning. Matching is case-sensitive.
"""

from collections.abc import Iterable, Sequence

from notetree.core.tree.index import TreeIndex
from notetree.core.tree.navigation import get_breadcrumbs
from notetree.models.note import Note, SearchResult

TITLE_SCORE = 2.0
BODY_SCORE = 1.0


def matches(text: str, keyword: str | None) -> bool:
    """True if ``keyword`` is empty/absent or occurs anywhere in ``text``."""
    if not keyword:
        return True
    return keyword in text


def filter_notes(
    notes: Iterable[Note | None],
    keyword: str | None = None,
    *,
    fields: Sequence[str] = ("title",),
) -> list[Note]:
    """Keep the notes whose ``fields`` match ``keyword``, preserving input order.

    Holes (``None`` entries) are skipped.
    """
    result: list[Note] = []
    for note in notes:
        if note is None:
            continue
        if any(matches(getattr(note, name), keyword) for name in fields):
            result.append(note)
    return result


def highlight(text: str, keyword: str | None) -> list[tuple[str, bool]]:
    """Split ``text`` into ``(segment, is_match)`` pairs for display."""
    if not keyword or keyword not in text:
        return [(text, False)] if text else []
    segments: list[tuple[str, bool]] = []
    for i, part in enumerate(text.split(keyword)):
        if i:
            segments.append((keyword, True))
        if part:
            segments.append((part, False))
    return segments


def make_snippet(text: str, keyword: str | None, *, width: int = 32) -> str:
    """Excerpt of ``text`` around the first hit, with the hit wrapped in ``**``."""
    if not keyword or keyword not in text:
        return text[: width * 2] + ("..." if len(text) > width * 2 else "")

    start = text.index(keyword)
    end = start + len(keyword)
    lo = max(0, start - width)
    hi = min(len(text), end + width)
    prefix = "..." if lo > 0 else ""
    suffix = "..." if hi < len(text) else ""
    return f"{prefix}{text[lo:start]}**{keyword}**{text[end:hi]}{suffix}"


def search_notes(
    index: TreeIndex,
    *,
    query: str = "",
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[SearchResult], int]:
    """Search live notes by title and body.

    Title hits rank above body-only hits; within a score the index order is
    kept.

    Args:
        index: The tree to search.
        query: Literal keyword.
        limit: Max results to return.
        offset: Pagination offset.

    Returns:
        Tuple of (results, total_count).
    """
    if not query.strip():
        return [], 0

    scored: list[tuple[float, Note]] = []
    for note in index.live_notes():
        if matches(note.title, query):
            scored.append((TITLE_SCORE, note))
        elif matches(note.raw_content, query):
            scored.append((BODY_SCORE, note))
    scored.sort(key=lambda hit: -hit[0])

    results = [
        SearchResult(
            note=note,
            snippet=make_snippet(
                note.raw_content if query in note.raw_content else note.title, query
            ),
            breadcrumbs=get_breadcrumbs(index, note.id),
            score=score,
        )
        for score, note in scored[offset : offset + limit]
    ]
    return results, len(scored)
