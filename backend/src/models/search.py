"""Search request/response models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .note import NoteRecord, ensure_utc

DEFAULT_SEARCH_LIMIT = 50
DEFAULT_SUGGESTION_LIMIT = 5


class SortMode(str, Enum):
    """Result ordering for indexed searches."""

    RELEVANCE = "relevance"
    DATE = "date"
    TITLE = "title"


class DateRange(BaseModel):
    """Inclusive range compared against a note's ``updated_at``."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _normalize(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("date_range start must not be after end")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class SearchOptions(BaseModel):
    """Structured filters, ordering and limit for a search."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category_id: Optional[int] = None
    tag_ids: frozenset[int] = Field(default_factory=frozenset)
    is_favorite: Optional[bool] = None
    date_range: Optional[DateRange] = None
    sort_by: SortMode = SortMode.RELEVANCE
    limit: int = Field(DEFAULT_SEARCH_LIMIT, gt=0)

    @property
    def has_structured_filter(self) -> bool:
        return (
            self.category_id is not None
            or bool(self.tag_ids)
            or self.is_favorite is not None
            or self.date_range is not None
        )


class SearchHit(NoteRecord):
    """Note returned from an indexed search; ``score`` is set when text was scored."""

    score: Optional[int] = Field(None, description="Relevance score for the text query")


class IndexStats(BaseModel):
    """Size of the in-memory search index."""

    entry_count: int = Field(..., ge=0)
    total_terms: int = Field(..., ge=0)
    mean_terms_per_entry: float = Field(..., ge=0)


class RebuildResponse(BaseModel):
    """Response from an index rebuild."""

    status: str
    stats: IndexStats


__all__ = [
    "DEFAULT_SEARCH_LIMIT",
    "DEFAULT_SUGGESTION_LIMIT",
    "SortMode",
    "DateRange",
    "SearchOptions",
    "SearchHit",
    "IndexStats",
    "RebuildResponse",
]
