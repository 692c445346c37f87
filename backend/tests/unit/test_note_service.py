from pathlib import Path

import pytest

from backend.src.models.note import CategoryCreate, NoteCreate, NoteUpdate
from backend.src.services.database import DatabaseService
from backend.src.services.note_repository import NoteNotFoundError, NoteRepository
from backend.src.services.note_service import NoteService
from backend.src.services.search_index import IndexState
from backend.src.services.search_service import SearchService


@pytest.fixture
def repository(tmp_path: Path) -> NoteRepository:
    db_service = DatabaseService(tmp_path / "notes.db")
    db_service.initialize()
    return NoteRepository(db_service)


@pytest.fixture
def search_service(repository: NoteRepository) -> SearchService:
    return SearchService(repository)


@pytest.fixture
def note_service(repository: NoteRepository, search_service: SearchService) -> NoteService:
    return NoteService(repository, search_service)


async def _ids(search_service: SearchService, query: str):
    return [note.id for note in await search_service.search(query)]


@pytest.mark.asyncio
async def test_create_derives_title_from_content(note_service: NoteService) -> None:
    note = await note_service.create_note(NoteCreate(content="# Weekly Review\n\nwins and misses"))

    assert note.title == "Weekly Review"
    assert await note_service.get_note(note.id) == note


@pytest.mark.asyncio
async def test_created_note_is_searchable_once_index_is_ready(
    note_service: NoteService, search_service: SearchService
) -> None:
    await note_service.create_note(NoteCreate(title="Seed", content="first"))
    await search_service.initialize()

    created = await note_service.create_note(
        NoteCreate(title="Kubernetes", content="pods", tags=["infra"])
    )

    assert await _ids(search_service, "kubernetes") == [created.id]
    assert await search_service.suggest("inf") == ["infra"]


@pytest.mark.asyncio
async def test_create_before_first_search_is_loaded_by_the_build(
    note_service: NoteService, search_service: SearchService
) -> None:
    created = await note_service.create_note(NoteCreate(title="Terraform", content="modules"))

    assert search_service.state is IndexState.UNINITIALIZED
    assert await _ids(search_service, "terraform") == [created.id]


@pytest.mark.asyncio
async def test_update_refreshes_index_entry(
    note_service: NoteService, search_service: SearchService
) -> None:
    note = await note_service.create_note(NoteCreate(title="Draft", content="placeholder"))
    await search_service.initialize()

    updated = await note_service.update_note(
        note.id, NoteUpdate(title="Postgres Tuning", tags=["database"])
    )

    assert updated.content == "placeholder"
    assert [tag.name for tag in updated.tags] == ["database"]
    assert await _ids(search_service, "postgres") == [note.id]
    assert await _ids(search_service, "draft") == []


@pytest.mark.asyncio
async def test_delete_drops_index_entry(
    note_service: NoteService, search_service: SearchService
) -> None:
    note = await note_service.create_note(NoteCreate(title="Temporary", content="scratch"))
    await search_service.initialize()

    await note_service.delete_note(note.id)

    assert await _ids(search_service, "temporary") == []
    with pytest.raises(NoteNotFoundError):
        await note_service.get_note(note.id)


@pytest.mark.asyncio
async def test_archive_and_unarchive_toggle_searchability(
    note_service: NoteService, search_service: SearchService
) -> None:
    note = await note_service.create_note(NoteCreate(title="Quarterly Plan"))
    await search_service.initialize()

    archived = await note_service.archive_note(note.id)
    assert archived.is_archived is True
    assert await _ids(search_service, "quarterly") == []
    assert await note_service.list_notes() == []

    await note_service.unarchive_note(note.id)
    assert await _ids(search_service, "quarterly") == [note.id]


@pytest.mark.asyncio
async def test_toggle_favorite_updates_filter_results(
    note_service: NoteService, search_service: SearchService
) -> None:
    note = await note_service.create_note(NoteCreate(title="Recipes"))
    await search_service.initialize()

    toggled = await note_service.toggle_favorite(note.id)
    favorites = await search_service.search("", {"is_favorite": True})

    assert toggled.is_favorite is True
    assert [hit.id for hit in favorites] == [note.id]

    toggled_back = await note_service.toggle_favorite(note.id)
    assert toggled_back.is_favorite is False


@pytest.mark.asyncio
async def test_import_rebuilds_a_ready_index(
    note_service: NoteService, search_service: SearchService
) -> None:
    await search_service.initialize()

    created = await note_service.import_notes(
        [NoteCreate(title="Imported One"), NoteCreate(content="Imported Two\nbody")]
    )

    assert [note.title for note in created] == ["Imported One", "Imported Two"]
    stats = await search_service.stats()
    assert stats.entry_count == 2


@pytest.mark.asyncio
async def test_import_leaves_uninitialized_index_alone(
    note_service: NoteService, search_service: SearchService
) -> None:
    await note_service.import_notes([NoteCreate(title="Lazy")])

    assert search_service.state is IndexState.UNINITIALIZED


@pytest.mark.asyncio
async def test_categories_tags_and_stats(note_service: NoteService) -> None:
    category = await note_service.create_category(CategoryCreate(name="Work"))
    await note_service.create_note(
        NoteCreate(title="Standup", category_id=category.id, is_favorite=True, tags=["daily"])
    )
    await note_service.create_note(NoteCreate(title="Retro", tags=["daily", "team"]))

    categories = await note_service.list_categories()
    tags = await note_service.list_tags()
    stats = await note_service.stats()

    assert [c.name for c in categories] == ["Work"]
    assert [(tag.name, tag.count) for tag in tags] == [("daily", 2), ("team", 1)]
    assert stats.total_notes == 2
    assert stats.favorite_notes == 1
    assert stats.total_categories == 1
    assert stats.total_tags == 2


@pytest.mark.asyncio
async def test_category_filter_after_create(
    note_service: NoteService, search_service: SearchService
) -> None:
    category = await note_service.create_category(CategoryCreate(name="Travel"))
    note = await note_service.create_note(NoteCreate(title="Lisbon", category_id=category.id))
    await note_service.create_note(NoteCreate(title="Groceries"))

    results = await search_service.search("", {"category_id": category.id})

    assert [hit.id for hit in results] == [note.id]
    assert results[0].category_name == "Travel"
