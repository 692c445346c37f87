"""Auto-complete suggestions drawn from titles, tag names and category names."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .search_index import IndexEntry

MIN_SUGGESTION_QUERY_LENGTH = 2


def collect_suggestions(entries: Iterable[IndexEntry], query: str, limit: int) -> List[str]:
    """
    Return distinct titles, then tag names, then category names containing ``query``.

    Matching is case-insensitive substring containment; the first pass to produce
    a string decides its position.
    """
    if not query or len(query) < MIN_SUGGESTION_QUERY_LENGTH:
        return []

    needle = query.lower()
    snapshot = list(entries)
    suggestions: Dict[str, None] = {}

    for entry in snapshot:
        title = entry.note.title or ""
        if needle in title.lower():
            suggestions.setdefault(title, None)

    for entry in snapshot:
        for tag in entry.note.tags:
            if needle in tag.name.lower():
                suggestions.setdefault(tag.name, None)

    for entry in snapshot:
        category = entry.note.category_name
        if category and needle in category.lower():
            suggestions.setdefault(category, None)

    return list(suggestions)[:limit]


__all__ = ["collect_suggestions", "MIN_SUGGESTION_QUERY_LENGTH"]
