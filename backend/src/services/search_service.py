"""Search facade: lazy index lifecycle, queries, suggestions and index maintenance."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..models.note import NoteRecord
from ..models.search import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SUGGESTION_LIMIT,
    IndexStats,
    SearchOptions,
)
from .config import get_config
from .markdown import extract_plain_text
from .note_repository import get_note_repository
from .query_engine import run_query
from .search_index import IndexState, NoteCorpus, SearchIndex, fetch_corpus
from .suggestions import MIN_SUGGESTION_QUERY_LENGTH, collect_suggestions
from .tokenizer import TextExtractor

logger = logging.getLogger(__name__)

OptionsInput = Union[SearchOptions, Mapping[str, Any], None]


class SearchValidationError(ValueError):
    """Raised when search options or suggestion parameters are malformed."""

    def __init__(self, message: str, *, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class SearchService:
    """Owns the search index and answers searches and suggestions against it."""

    def __init__(
        self,
        corpus: NoteCorpus,
        *,
        extract_text: TextExtractor = extract_plain_text,
        fetch_timeout: Optional[float] = None,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> None:
        self.corpus = corpus
        self.fetch_timeout = fetch_timeout
        self.default_limit = default_limit
        self.suggestion_limit = suggestion_limit
        self.index = SearchIndex(corpus, extract_text=extract_text, fetch_timeout=fetch_timeout)

    @property
    def state(self) -> IndexState:
        return self.index.state

    def parse_options(self, options: OptionsInput) -> SearchOptions:
        """Validate raw options, filling in the configured default limit."""
        if isinstance(options, SearchOptions):
            return options
        data: Dict[str, Any] = dict(options or {})
        if data.get("limit") is None:
            data["limit"] = self.default_limit
        try:
            return SearchOptions.model_validate(data)
        except ValidationError as exc:
            raise SearchValidationError(
                "Invalid search options",
                errors=exc.errors(include_url=False, include_context=False),
            ) from exc

    async def initialize(self) -> None:
        await self.index.initialize()

    async def search(self, query: Optional[str] = None, options: OptionsInput = None) -> List[NoteRecord]:
        """
        Search notes.

        With no query text and no structured filter the corpus is returned as the
        note store lists it, bypassing the index. Otherwise results are scored,
        filtered, sorted and limited from the index.
        """
        parsed = self.parse_options(options)
        text = (query or "").strip()

        if not text and not parsed.has_structured_filter:
            return list(await fetch_corpus(self.corpus, self.fetch_timeout))

        await self.index.initialize()

        start_time = time.time()
        hits = run_query(self.index.entries(), text, parsed)
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Search completed",
            extra={
                "query": text,
                "sort_by": parsed.sort_by.value,
                "limit": parsed.limit,
                "result_count": len(hits),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return list(hits)

    async def suggest(self, query: str, limit: Optional[int] = None) -> List[str]:
        """Auto-complete candidates for ``query`` (titles, then tags, then categories)."""
        effective_limit = self.suggestion_limit if limit is None else limit
        if effective_limit < 1:
            raise SearchValidationError("Suggestion limit must be a positive integer")
        if not query or len(query) < MIN_SUGGESTION_QUERY_LENGTH:
            return []
        await self.index.initialize()
        return collect_suggestions(self.index.entries(), query, effective_limit)

    def upsert(self, note: NoteRecord) -> None:
        self.index.upsert(note)

    def remove(self, note_id: int) -> None:
        self.index.remove(note_id)

    async def rebuild(self) -> IndexStats:
        """Reload every entry from the note store and return the new index size."""
        await self.index.rebuild()
        stats = self.index.stats()
        logger.info("Search index rebuilt", extra={"entry_count": stats.entry_count})
        return stats

    async def stats(self) -> IndexStats:
        await self.index.initialize()
        return self.index.stats()


_search_service: SearchService | None = None


def get_search_service() -> SearchService:
    """Get or create the search service singleton backed by the SQLite note store."""
    global _search_service
    if _search_service is None:
        config = get_config()
        _search_service = SearchService(
            get_note_repository(),
            fetch_timeout=config.corpus_fetch_timeout,
            default_limit=config.default_search_limit,
            suggestion_limit=config.suggestion_limit,
        )
    return _search_service


def reset_search_service() -> None:
    """Drop the singleton (tests and config reloads)."""
    global _search_service
    _search_service = None


__all__ = [
    "SearchService",
    "SearchValidationError",
    "get_search_service",
    "reset_search_service",
]
