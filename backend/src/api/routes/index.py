"""HTTP API routes for index operations."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...models.search import IndexStats, RebuildResponse
from ...services.search_service import SearchService, get_search_service

router = APIRouter()


@router.get("/api/index/stats", response_model=IndexStats)
async def get_index_stats(search_service: SearchService = Depends(get_search_service)):
    """Get entry and term counts for the search index."""
    return await search_service.stats()


@router.post("/api/index/rebuild", response_model=RebuildResponse)
async def rebuild_index(search_service: SearchService = Depends(get_search_service)):
    """Rebuild the entire index from the note store."""
    stats = await search_service.rebuild()
    return RebuildResponse(status="completed", stats=stats)


__all__ = ["router"]
