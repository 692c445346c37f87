"""In-memory search index over the note corpus."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Dict, List, Optional, Protocol, Tuple

from ..models.note import NoteRecord
from ..models.search import IndexStats
from .markdown import extract_plain_text
from .tokenizer import TextExtractor, build_searchable_content, generate_search_terms

logger = logging.getLogger(__name__)


class CorpusFetchError(Exception):
    """Raised when the note corpus cannot be loaded into the index."""


class NoteCorpus(Protocol):
    """Source of the full note corpus."""

    async def list_all(self) -> List[NoteRecord]:
        ...


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    READY = "ready"


@dataclass(frozen=True)
class IndexEntry:
    """A note together with its precomputed searchable representation."""

    note: NoteRecord
    searchable_content: str
    search_terms: Tuple[str, ...]


# Maintenance calls recorded while a build is in flight: (note id, entry or None for removal).
_JournalItem = Tuple[int, Optional[IndexEntry]]


async def fetch_corpus(corpus: NoteCorpus, timeout: Optional[float]) -> List[NoteRecord]:
    """Load every note from the corpus, bounded by ``timeout`` seconds."""
    try:
        if timeout:
            notes = await asyncio.wait_for(corpus.list_all(), timeout)
        else:
            notes = await corpus.list_all()
    except asyncio.TimeoutError as exc:
        raise CorpusFetchError(f"Note corpus did not respond within {timeout:g}s") from exc
    except CorpusFetchError:
        raise
    except Exception as exc:
        raise CorpusFetchError(f"Failed to load note corpus: {exc}") from exc
    return list(notes)


class SearchIndex:
    """
    Insertion-ordered mapping of note id to index entry.

    The index is built lazily from the corpus on first use. Concurrent callers of
    ``initialize``/``build`` share one in-flight build task. A failed build leaves
    the previous state untouched: uninitialized before the first success, the last
    ready snapshot afterwards.
    """

    def __init__(
        self,
        corpus: NoteCorpus,
        *,
        extract_text: TextExtractor = extract_plain_text,
        fetch_timeout: Optional[float] = None,
    ) -> None:
        self._corpus = corpus
        self._extract_text = extract_text
        self._fetch_timeout = fetch_timeout
        self._entries: Dict[int, IndexEntry] = {}
        self._state = IndexState.UNINITIALIZED
        self._build_task: Optional[asyncio.Task[None]] = None
        self._journal: List[_JournalItem] = []

    @property
    def state(self) -> IndexState:
        return self._state

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._entries

    def get(self, note_id: int) -> Optional[IndexEntry]:
        return self._entries.get(note_id)

    def entries(self) -> List[IndexEntry]:
        """Snapshot of all entries in insertion order."""
        return list(self._entries.values())

    def make_entry(self, note: NoteRecord) -> IndexEntry:
        searchable = build_searchable_content(note, self._extract_text)
        return IndexEntry(
            note=note,
            searchable_content=searchable,
            search_terms=tuple(generate_search_terms(searchable)),
        )

    async def initialize(self) -> None:
        """Build the index unless a build has already succeeded."""
        if self._state is IndexState.READY:
            return
        await self.build()

    async def build(self) -> None:
        """Load the corpus and replace every entry, joining a build already in flight."""
        if self._build_task is None:
            self._build_task = asyncio.create_task(self._run_build())
        await asyncio.shield(self._build_task)

    async def rebuild(self) -> None:
        """Force a full refresh from the corpus."""
        pending = self._build_task
        if pending is not None:
            # A build that started before the caller's changes may not include them.
            await asyncio.wait([pending])
        await self.build()

    def upsert(self, note: NoteRecord) -> bool:
        """Insert or refresh the entry for ``note``; returns False when the call was dropped."""
        if self._state is IndexState.UNINITIALIZED:
            logger.debug("Index not initialized; dropping upsert", extra={"note_id": note.id})
            return False
        entry = self.make_entry(note)
        self._entries[note.id] = entry
        if self._state is IndexState.BUILDING:
            self._journal.append((note.id, entry))
        return True

    def remove(self, note_id: int) -> None:
        """Delete the entry for ``note_id``; unknown ids are ignored."""
        self._entries.pop(note_id, None)
        if self._state is IndexState.BUILDING:
            self._journal.append((note_id, None))

    def stats(self) -> IndexStats:
        entry_count = len(self._entries)
        total_terms = sum(len(entry.search_terms) for entry in self._entries.values())
        return IndexStats(
            entry_count=entry_count,
            total_terms=total_terms,
            mean_terms_per_entry=(total_terms / entry_count) if entry_count else 0.0,
        )

    async def _run_build(self) -> None:
        start_time = time.time()
        had_snapshot = self._state is IndexState.READY
        self._state = IndexState.BUILDING
        self._journal = []
        try:
            notes = await fetch_corpus(self._corpus, self._fetch_timeout)
            entries: Dict[int, IndexEntry] = {}
            for note in notes:
                entries[note.id] = self.make_entry(note)
            self._replay_journal(entries)
        except Exception:
            if had_snapshot:
                self._state = IndexState.READY
            else:
                self._state = IndexState.UNINITIALIZED
                self._entries = {}
            logger.error(
                "Search index build failed",
                exc_info=True,
                extra={"kept_snapshot": had_snapshot, "entry_count": len(self._entries)},
            )
            raise
        finally:
            self._journal = []
            self._build_task = None

        self._entries = entries
        self._state = IndexState.READY
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Search index built",
            extra={
                "entry_count": len(entries),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )

    def _replay_journal(self, entries: Dict[int, IndexEntry]) -> None:
        for note_id, entry in self._journal:
            if entry is None:
                entries.pop(note_id, None)
            else:
                entries[note_id] = entry


__all__ = [
    "CorpusFetchError",
    "IndexEntry",
    "IndexState",
    "NoteCorpus",
    "SearchIndex",
    "fetch_corpus",
]
