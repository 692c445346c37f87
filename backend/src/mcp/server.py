"""FastMCP server exposing notebook search tools."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

# Load environment variables from .env file
load_dotenv()

from ..api.routes.search import build_search_options
from ..services.search_service import get_search_service

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "notebook-search",
    instructions=(
        "Search a personal notebook. search_notes ranks notes by a text query (title +10, body +5, "
        "each fuzzy token +2, category and each tag +3 per query term) and filters by category id, "
        "tag ids (any), favorite flag and an inclusive updated_at range. With no query and no filter "
        "it returns every note in store order. suggest returns up to `limit` titles, tag names and "
        "category names containing the text (at least 2 characters)."
    ),
)


@mcp.tool(name="search_notes", description="Search notes by text and structured filters.")
async def search_notes(
    query: str = Field("", description="Free-text query; may be empty when filters are given."),
    category_id: Optional[int] = Field(None, description="Only notes in this category."),
    tag_ids: Optional[List[int]] = Field(None, description="Notes carrying any of these tag ids."),
    is_favorite: Optional[bool] = Field(None, description="Filter on the favorite flag."),
    date_from: Optional[str] = Field(None, description="Inclusive ISO 8601 lower bound on updated_at."),
    date_to: Optional[str] = Field(None, description="Inclusive ISO 8601 upper bound on updated_at."),
    sort_by: str = Field("relevance", description="relevance, date or title."),
    limit: int = Field(50, ge=1, le=500, description="Maximum number of results."),
) -> Dict[str, Any]:
    start_time = time.time()
    options = build_search_options(
        category_id=category_id,
        tag_ids=tag_ids,
        is_favorite=is_favorite,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        limit=limit,
    )
    results = await get_search_service().search(query, options)

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "MCP tool called",
        extra={
            "tool_name": "search_notes",
            "query": query,
            "result_count": len(results),
            "duration_ms": f"{duration_ms:.2f}",
        },
    )
    return {
        "results": [
            {
                "id": note.id,
                "title": note.title,
                "category": note.category_name,
                "tags": [tag.name for tag in note.tags],
                "is_favorite": note.is_favorite,
                "score": getattr(note, "score", None),
                "updated_at": note.updated_at.isoformat(),
            }
            for note in results
        ]
    }


@mcp.tool(name="suggest", description="Auto-complete from note titles, tag names and category names.")
async def suggest(
    query: str = Field(..., description="Text to complete (at least 2 characters)."),
    limit: int = Field(5, ge=1, le=50, description="Maximum number of suggestions."),
) -> List[str]:
    return await get_search_service().suggest(query, limit)


@mcp.tool(name="index_stats", description="Entry and term counts of the search index.")
async def index_stats() -> Dict[str, Any]:
    stats = await get_search_service().stats()
    return stats.model_dump()


@mcp.tool(name="rebuild_index", description="Reload every note into the search index.")
async def rebuild_index() -> Dict[str, Any]:
    stats = await get_search_service().rebuild()
    return {"status": "completed", "stats": stats.model_dump()}


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"

    # Configure HTTP transport with custom port if specified
    if transport == "http":
        port = int(os.getenv("MCP_PORT", "8001"))
        host = os.getenv("MCP_HOST", "127.0.0.1")
        logger.info(
            "Starting MCP server",
            extra={"transport": transport, "host": host, "port": port},
        )
        mcp.run(transport=transport, host=host, port=port)
    else:
        logger.info("Starting MCP server", extra={"transport": transport})
        mcp.run(transport=transport)
