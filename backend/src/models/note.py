"""Note-related Pydantic models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_NOTE_TITLE = "Untitled"


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TagRef(BaseModel):
    """Tag attached to a note."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(..., min_length=1)
    color: Optional[str] = None


class NoteRecord(BaseModel):
    """Note as returned by the note store, with category and tags denormalized."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 42,
                "title": "Go Routines",
                "content": "# Go Routines\\n\\nConcurrency patterns...",
                "category_id": 3,
                "category_name": "Programming",
                "category_color": "#6B7280",
                "tags": [{"id": 9, "name": "golang", "color": "#3B82F6"}],
                "is_favorite": False,
                "is_archived": False,
                "created_at": "2025-01-10T09:00:00Z",
                "updated_at": "2025-01-15T14:30:00Z",
            }
        }
    )

    id: int = Field(..., description="Stable note identifier")
    title: str = Field("", description="Display title (may be empty)")
    content: str = Field("", description="Markdown source")
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    tags: list[TagRef] = Field(default_factory=list)
    is_favorite: bool = False
    is_archived: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[TagRef]) -> list[TagRef]:
        seen: set[int] = set()
        for tag in value:
            if tag.id in seen:
                raise ValueError(f"Duplicate tag id {tag.id} on note")
            seen.add(tag.id)
        return value


class NoteCreate(BaseModel):
    """Request payload to create a note."""

    title: Optional[str] = Field(None, max_length=256)
    content: str = Field("", max_length=1_048_576)
    category_id: Optional[int] = None
    is_favorite: bool = False
    tags: list[str] = Field(default_factory=list, description="Tag names")


class NoteUpdate(BaseModel):
    """Request payload to update a note. Unset fields are left unchanged."""

    title: Optional[str] = Field(None, max_length=256)
    content: Optional[str] = Field(None, max_length=1_048_576)
    category_id: Optional[int] = None
    is_favorite: Optional[bool] = None
    tags: Optional[list[str]] = None


class Category(BaseModel):
    """Category used to group notes."""

    id: int
    name: str
    color: str = "#6B7280"
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None


class CategoryCreate(BaseModel):
    """Request payload to create a category."""

    name: str = Field(..., min_length=1, max_length=128)
    color: str = "#6B7280"
    parent_id: Optional[int] = None


class Tag(BaseModel):
    """Tag with aggregated usage count."""

    id: int
    name: str
    color: str = "#3B82F6"
    count: int = Field(0, ge=0)


class NoteStats(BaseModel):
    """Aggregate counts over the note store."""

    total_notes: int = Field(..., ge=0)
    favorite_notes: int = Field(..., ge=0)
    total_categories: int = Field(..., ge=0)
    total_tags: int = Field(..., ge=0)


__all__ = [
    "DEFAULT_NOTE_TITLE",
    "ensure_utc",
    "TagRef",
    "NoteRecord",
    "NoteCreate",
    "NoteUpdate",
    "Category",
    "CategoryCreate",
    "Tag",
    "NoteStats",
]
