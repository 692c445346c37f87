"""HTTP API routes for note, category and tag operations."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ...models.note import (
    Category,
    CategoryCreate,
    NoteCreate,
    NoteRecord,
    NoteStats,
    NoteUpdate,
    Tag,
)
from ...services.note_service import NoteService, get_note_service

router = APIRouter()


@router.get("/api/notes", response_model=list[NoteRecord])
async def list_notes(note_service: NoteService = Depends(get_note_service)):
    """List all non-archived notes, most recently updated first."""
    return await note_service.list_notes()


@router.post("/api/notes", response_model=NoteRecord, status_code=201)
async def create_note(create: NoteCreate, note_service: NoteService = Depends(get_note_service)):
    """Create a new note."""
    try:
        return await note_service.create_note(create)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/notes/import", response_model=list[NoteRecord], status_code=201)
async def import_notes(
    payloads: List[NoteCreate], note_service: NoteService = Depends(get_note_service)
):
    """Create many notes at once and refresh the search index."""
    try:
        return await note_service.import_notes(payloads)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/notes/stats", response_model=NoteStats)
async def get_note_stats(note_service: NoteService = Depends(get_note_service)):
    """Aggregate note, favorite, category and tag counts."""
    return await note_service.stats()


@router.get("/api/notes/{note_id}", response_model=NoteRecord)
async def get_note(note_id: int, note_service: NoteService = Depends(get_note_service)):
    """Get a specific note by id."""
    return await note_service.get_note(note_id)


@router.put("/api/notes/{note_id}", response_model=NoteRecord)
async def update_note(
    note_id: int, update: NoteUpdate, note_service: NoteService = Depends(get_note_service)
):
    """Update a note's fields and tags."""
    try:
        return await note_service.update_note(note_id, update)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/api/notes/{note_id}", status_code=204)
async def delete_note(note_id: int, note_service: NoteService = Depends(get_note_service)):
    """Delete a note and drop it from the search index."""
    await note_service.delete_note(note_id)
    return Response(status_code=204)


@router.post("/api/notes/{note_id}/favorite", response_model=NoteRecord)
async def toggle_favorite(note_id: int, note_service: NoteService = Depends(get_note_service)):
    """Flip a note's favorite flag."""
    return await note_service.toggle_favorite(note_id)


@router.post("/api/notes/{note_id}/archive", response_model=NoteRecord)
async def archive_note(note_id: int, note_service: NoteService = Depends(get_note_service)):
    return await note_service.archive_note(note_id)


@router.post("/api/notes/{note_id}/unarchive", response_model=NoteRecord)
async def unarchive_note(note_id: int, note_service: NoteService = Depends(get_note_service)):
    return await note_service.unarchive_note(note_id)


@router.get("/api/categories", response_model=list[Category])
async def list_categories(note_service: NoteService = Depends(get_note_service)):
    return await note_service.list_categories()


@router.post("/api/categories", response_model=Category, status_code=201)
async def create_category(
    create: CategoryCreate, note_service: NoteService = Depends(get_note_service)
):
    try:
        return await note_service.create_category(create)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/api/tags", response_model=list[Tag])
async def get_tags(note_service: NoteService = Depends(get_note_service)):
    """Get all tags with usage counts."""
    return await note_service.list_tags()


__all__ = ["router"]
