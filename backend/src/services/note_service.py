"""Note operations that keep the search index in step with the note store."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from ..models.note import Category, CategoryCreate, NoteCreate, NoteRecord, NoteStats, NoteUpdate, Tag
from .markdown import extract_title
from .note_repository import NoteRepository, get_note_repository
from .search_index import IndexState
from .search_service import SearchService, get_search_service

logger = logging.getLogger(__name__)


class NoteService:
    """CRUD over the note repository, mirroring each mutation into the search index."""

    def __init__(
        self,
        repository: NoteRepository | None = None,
        search_service: SearchService | None = None,
    ) -> None:
        self.repository = repository or get_note_repository()
        self.search = search_service or get_search_service()

    async def list_notes(self) -> List[NoteRecord]:
        return await self.repository.list_all()

    async def get_note(self, note_id: int) -> NoteRecord:
        return await asyncio.to_thread(self.repository.find_by_id, note_id)

    async def create_note(self, payload: NoteCreate) -> NoteRecord:
        note = await asyncio.to_thread(self._create, payload)
        self.search.upsert(note)
        return note

    async def update_note(self, note_id: int, payload: NoteUpdate) -> NoteRecord:
        changes = payload.model_dump(exclude_unset=True)
        tags = changes.pop("tags", None)
        note = await asyncio.to_thread(self.repository.update, note_id, changes, tags=tags)
        self._mirror(note)
        return note

    async def delete_note(self, note_id: int) -> None:
        await asyncio.to_thread(self.repository.delete, note_id)
        self.search.remove(note_id)

    async def toggle_favorite(self, note_id: int) -> NoteRecord:
        current = await self.get_note(note_id)
        note = await asyncio.to_thread(
            self.repository.update, note_id, {"is_favorite": not current.is_favorite}
        )
        self._mirror(note)
        return note

    async def archive_note(self, note_id: int) -> NoteRecord:
        note = await asyncio.to_thread(self.repository.update, note_id, {"is_archived": True})
        self._mirror(note)
        return note

    async def unarchive_note(self, note_id: int) -> NoteRecord:
        note = await asyncio.to_thread(self.repository.update, note_id, {"is_archived": False})
        self._mirror(note)
        return note

    async def import_notes(self, payloads: Sequence[NoteCreate]) -> List[NoteRecord]:
        """Create many notes at once, then refresh the index with a single rebuild."""
        created = await asyncio.to_thread(self._create_many, list(payloads))
        if self.search.state is not IndexState.UNINITIALIZED:
            await self.search.rebuild()
        logger.info("Notes imported", extra={"count": len(created)})
        return created

    async def list_categories(self) -> List[Category]:
        return await asyncio.to_thread(self.repository.list_categories)

    async def create_category(self, payload: CategoryCreate) -> Category:
        return await asyncio.to_thread(
            self.repository.create_category, payload.name, payload.color, payload.parent_id
        )

    async def list_tags(self) -> List[Tag]:
        return await asyncio.to_thread(self.repository.list_tags)

    async def stats(self) -> NoteStats:
        categories = await self.list_categories()
        tags = await self.list_tags()
        return NoteStats(
            total_notes=await asyncio.to_thread(self.repository.count_notes),
            favorite_notes=await asyncio.to_thread(self.repository.count_notes, favorites_only=True),
            total_categories=len(categories),
            total_tags=len(tags),
        )

    def _mirror(self, note: NoteRecord) -> None:
        # Archived notes are not part of the searchable corpus.
        if note.is_archived:
            self.search.remove(note.id)
        else:
            self.search.upsert(note)

    def _create(self, payload: NoteCreate) -> NoteRecord:
        title = (payload.title or "").strip() or extract_title(payload.content)
        return self.repository.create(
            title=title,
            content=payload.content,
            category_id=payload.category_id,
            is_favorite=payload.is_favorite,
            tags=payload.tags,
        )

    def _create_many(self, payloads: List[NoteCreate]) -> List[NoteRecord]:
        return [self._create(payload) for payload in payloads]


_note_service: NoteService | None = None


def get_note_service() -> NoteService:
    """Get or create the note service singleton."""
    global _note_service
    if _note_service is None:
        _note_service = NoteService()
    return _note_service


def reset_note_service() -> None:
    global _note_service
    _note_service = None


__all__ = ["NoteService", "get_note_service", "reset_note_service"]
