"""Turn note text into the token lists stored in the search index."""

from __future__ import annotations

import re
from typing import Callable, List

from ..models.note import NoteRecord

NON_WORD_PATTERN = re.compile(r"\W+", re.ASCII)
MIN_TERM_LENGTH = 3

TextExtractor = Callable[[str], str]


def build_searchable_content(note: NoteRecord, extract_text: TextExtractor) -> str:
    """Lower-cased title, plain-text body, category name and tag names, space-joined."""
    tags = " ".join(tag.name for tag in note.tags)
    parts = (
        note.title or "",
        extract_text(note.content or ""),
        note.category_name or "",
        tags,
    )
    return " ".join(parts).lower()


def generate_search_terms(content: str) -> List[str]:
    """
    Tokenize searchable content.

    Splits on whitespace, drops raw tokens shorter than three characters, strips
    every character outside ``[A-Za-z0-9_]`` and drops tokens left empty. Order and
    duplicates are kept.
    """
    terms: List[str] = []
    for raw in content.split():
        if len(raw) < MIN_TERM_LENGTH:
            continue
        term = NON_WORD_PATTERN.sub("", raw)
        if term:
            terms.append(term)
    return terms


def split_query(query: str) -> List[str]:
    """Lower-case a free-text query and split it on whitespace."""
    return query.lower().split()


__all__ = [
    "build_searchable_content",
    "generate_search_terms",
    "split_query",
    "TextExtractor",
    "MIN_TERM_LENGTH",
]
