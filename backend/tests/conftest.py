from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

import pytest

from backend.src.models.note import NoteRecord, TagRef

T1 = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(days=2)


def make_note(
    note_id: int,
    title: str = "",
    content: str = "",
    *,
    category_id: Optional[int] = None,
    category_name: Optional[str] = None,
    tags: Iterable[tuple[int, str]] = (),
    is_favorite: bool = False,
    updated_at: datetime = T1,
) -> NoteRecord:
    return NoteRecord(
        id=note_id,
        title=title,
        content=content,
        category_id=category_id,
        category_name=category_name,
        tags=[TagRef(id=tag_id, name=name) for tag_id, name in tags],
        is_favorite=is_favorite,
        created_at=updated_at,
        updated_at=updated_at,
    )


class FakeCorpus:
    """In-memory note store that counts fetches and can stall or fail on demand."""

    def __init__(self, notes: Iterable[NoteRecord] = ()) -> None:
        self.notes: List[NoteRecord] = list(notes)
        self.calls = 0
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    async def list_all(self) -> List[NoteRecord]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.notes)


@pytest.fixture
def scenario_notes() -> List[NoteRecord]:
    return [
        make_note(1, "Go Routines", "concurrency patterns", updated_at=T1),
        make_note(
            2,
            "Rust Ownership",
            "memory safety",
            tags=[(9, "systems")],
            is_favorite=True,
            updated_at=T2,
        ),
    ]


@pytest.fixture
def corpus(scenario_notes: List[NoteRecord]) -> FakeCorpus:
    return FakeCorpus(scenario_notes)


@pytest.fixture(name="make_note")
def make_note_fixture():
    return make_note


@pytest.fixture
def corpus_factory():
    return FakeCorpus


@pytest.fixture
def t1() -> datetime:
    return T1


@pytest.fixture
def t2() -> datetime:
    return T2
