"""Scoring, filtering and ordering of index entries for a search."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence
import unicodedata

from ..models.search import SearchHit, SearchOptions, SortMode
from .search_index import IndexEntry
from .tokenizer import split_query

TITLE_WEIGHT = 10
CONTENT_WEIGHT = 5
FUZZY_TERM_WEIGHT = 2
CATEGORY_WEIGHT = 3
TAG_WEIGHT = 3


def score_entry(entry: IndexEntry, query_terms: Sequence[str]) -> int:
    """Sum the weighted matches of every query term against one entry."""
    note = entry.note
    title = (note.title or "").lower()
    category = (note.category_name or "").lower()
    tag_names = [tag.name.lower() for tag in note.tags]

    score = 0
    for term in query_terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in entry.searchable_content:
            score += CONTENT_WEIGHT
        fuzzy_matches = sum(
            1 for stored in entry.search_terms if term in stored or stored in term
        )
        score += fuzzy_matches * FUZZY_TERM_WEIGHT
        if category and term in category:
            score += CATEGORY_WEIGHT
        score += TAG_WEIGHT * sum(1 for name in tag_names if term in name)
    return score


def title_sort_key(title: Optional[str]) -> str:
    """Accent- and case-insensitive collation key; empty titles sort first."""
    decomposed = unicodedata.normalize("NFKD", title or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _hit(entry: IndexEntry, score: Optional[int] = None) -> SearchHit:
    return SearchHit.model_construct(**dict(entry.note), score=score)


def _score(entries: Iterable[IndexEntry], query: str) -> List[SearchHit]:
    query_terms = split_query(query)
    hits: List[SearchHit] = []
    for entry in entries:
        score = score_entry(entry, query_terms)
        if score > 0:
            hits.append(_hit(entry, score))
    return hits


def _apply_filters(hits: List[SearchHit], options: SearchOptions) -> List[SearchHit]:
    if options.category_id is not None:
        hits = [hit for hit in hits if hit.category_id == options.category_id]
    if options.tag_ids:
        hits = [hit for hit in hits if any(tag.id in options.tag_ids for tag in hit.tags)]
    if options.is_favorite is not None:
        hits = [hit for hit in hits if hit.is_favorite == options.is_favorite]
    if options.date_range is not None:
        hits = [hit for hit in hits if options.date_range.contains(hit.updated_at)]
    return hits


def sort_hits(hits: List[SearchHit], sort_by: SortMode, *, scored: bool) -> List[SearchHit]:
    """Order hits; Python's sort is stable so ties keep index insertion order."""
    if sort_by is SortMode.TITLE:
        return sorted(hits, key=lambda hit: title_sort_key(hit.title))
    if sort_by is SortMode.RELEVANCE and scored:
        return sorted(hits, key=lambda hit: hit.score or 0, reverse=True)
    return sorted(hits, key=lambda hit: hit.updated_at, reverse=True)


def run_query(
    entries: Sequence[IndexEntry], query: Optional[str], options: SearchOptions
) -> List[SearchHit]:
    """Score, filter, sort and limit ``entries`` for ``query``."""
    text = (query or "").strip()
    if text:
        hits = _score(entries, text)
    else:
        hits = [_hit(entry) for entry in entries]

    hits = _apply_filters(hits, options)
    hits = sort_hits(hits, options.sort_by, scored=bool(text))
    return hits[: options.limit]


__all__ = [
    "run_query",
    "score_entry",
    "sort_hits",
    "title_sort_key",
    "TITLE_WEIGHT",
    "CONTENT_WEIGHT",
    "FUZZY_TERM_WEIGHT",
    "CATEGORY_WEIGHT",
    "TAG_WEIGHT",
]
