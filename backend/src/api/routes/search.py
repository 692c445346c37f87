"""HTTP API routes for search operations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ...models.note import NoteRecord
from ...models.search import SearchHit
from ...services.search_service import SearchService, get_search_service

router = APIRouter()

OPEN_RANGE_START = datetime.min.replace(tzinfo=timezone.utc)
OPEN_RANGE_END = datetime.max.replace(tzinfo=timezone.utc)


def build_search_options(
    *,
    category_id: Optional[int],
    tag_ids: Optional[List[int]],
    is_favorite: Optional[bool],
    date_from: Optional[str],
    date_to: Optional[str],
    sort_by: Optional[str],
    limit: Optional[int],
) -> Dict[str, Any]:
    """Translate query parameters into raw options; validation happens in the service."""
    options: Dict[str, Any] = {"limit": limit}
    if category_id is not None:
        options["category_id"] = category_id
    if tag_ids:
        options["tag_ids"] = tag_ids
    if is_favorite is not None:
        options["is_favorite"] = is_favorite
    if date_from or date_to:
        # A missing bound leaves that side of the range open.
        options["date_range"] = {
            "start": date_from or OPEN_RANGE_START,
            "end": date_to or OPEN_RANGE_END,
        }
    if sort_by:
        options["sort_by"] = sort_by
    return options


def _as_hit(note: NoteRecord) -> SearchHit:
    if isinstance(note, SearchHit):
        return note
    return SearchHit(**note.model_dump())


@router.get("/api/search", response_model=list[SearchHit])
async def search_notes(
    q: Optional[str] = Query(None, max_length=256, description="Free-text query"),
    category_id: Optional[int] = Query(None),
    tag_ids: Optional[List[int]] = Query(None, description="Match notes carrying any of these tags"),
    is_favorite: Optional[bool] = Query(None),
    date_from: Optional[str] = Query(None, description="Inclusive lower bound on updated_at (ISO 8601)"),
    date_to: Optional[str] = Query(None, description="Inclusive upper bound on updated_at (ISO 8601)"),
    sort_by: Optional[str] = Query(None, description="relevance, date or title"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    search_service: SearchService = Depends(get_search_service),
):
    """Search notes by text and structured filters."""
    options = build_search_options(
        category_id=category_id,
        tag_ids=tag_ids,
        is_favorite=is_favorite,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        limit=limit,
    )
    results = await search_service.search(q, options)
    return [_as_hit(note) for note in results]


@router.get("/api/search/suggestions", response_model=list[str])
async def get_suggestions(
    q: str = Query("", max_length=256),
    limit: Optional[int] = Query(None, description="Maximum number of suggestions"),
    search_service: SearchService = Depends(get_search_service),
):
    """Auto-complete suggestions from note titles, tags and categories."""
    return await search_service.suggest(q, limit)


__all__ = ["router", "build_search_options"]
