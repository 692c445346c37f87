"""Pydantic models for data validation and serialization."""

from .note import (
    Category,
    CategoryCreate,
    NoteCreate,
    NoteRecord,
    NoteStats,
    NoteUpdate,
    Tag,
    TagRef,
)
from .search import DateRange, IndexStats, RebuildResponse, SearchHit, SearchOptions, SortMode

__all__ = [
    "NoteRecord",
    "NoteCreate",
    "NoteUpdate",
    "NoteStats",
    "TagRef",
    "Tag",
    "Category",
    "CategoryCreate",
    "SortMode",
    "DateRange",
    "SearchOptions",
    "SearchHit",
    "IndexStats",
    "RebuildResponse",
]
