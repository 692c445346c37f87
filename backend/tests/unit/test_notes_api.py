from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.services.database import DatabaseService
from backend.src.services.note_repository import NoteRepository
from backend.src.services.note_service import NoteService, get_note_service
from backend.src.services.search_service import SearchService, get_search_service

client = TestClient(app)


@pytest.fixture
def services(tmp_path: Path):
    db_service = DatabaseService(tmp_path / "api.db")
    db_service.initialize()
    repository = NoteRepository(db_service)
    search_service = SearchService(repository)
    note_service = NoteService(repository, search_service)
    app.dependency_overrides[get_note_service] = lambda: note_service
    app.dependency_overrides[get_search_service] = lambda: search_service
    yield note_service, search_service
    app.dependency_overrides = {}


def test_note_lifecycle(services) -> None:
    response = client.post(
        "/api/notes", json={"content": "# Trip Ideas\n\nPorto, Kyoto", "tags": ["travel"]}
    )
    assert response.status_code == 201
    note = response.json()
    assert note["title"] == "Trip Ideas"
    assert [tag["name"] for tag in note["tags"]] == ["travel"]

    response = client.get(f"/api/notes/{note['id']}")
    assert response.status_code == 200
    assert response.json()["content"] == "# Trip Ideas\n\nPorto, Kyoto"

    response = client.put(f"/api/notes/{note['id']}", json={"title": "Trip Plans"})
    assert response.status_code == 200
    assert response.json()["title"] == "Trip Plans"

    response = client.get("/api/search", params={"q": "plans"})
    assert [hit["id"] for hit in response.json()] == [note["id"]]

    response = client.delete(f"/api/notes/{note['id']}")
    assert response.status_code == 204

    response = client.get("/api/search", params={"q": "plans"})
    assert response.json() == []


def test_missing_note_returns_404(services) -> None:
    response = client.get("/api/notes/999")

    assert response.status_code == 404
    assert response.json() == {
        "error": "not_found",
        "message": "Note not found: 999",
        "detail": {"note_id": 999},
    }


def test_invalid_payload_returns_400(services) -> None:
    response = client.post("/api/notes", json={"title": "x" * 300})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_unknown_category_returns_400(services) -> None:
    response = client.post("/api/notes", json={"title": "Lost", "category_id": 42})

    assert response.status_code == 400
    assert "Invalid note reference" in response.json()["message"]


def test_favorite_and_archive_endpoints(services) -> None:
    note_id = client.post("/api/notes", json={"title": "Budget"}).json()["id"]

    response = client.post(f"/api/notes/{note_id}/favorite")
    assert response.json()["is_favorite"] is True

    response = client.post(f"/api/notes/{note_id}/archive")
    assert response.json()["is_archived"] is True
    assert client.get("/api/notes").json() == []

    response = client.post(f"/api/notes/{note_id}/unarchive")
    assert response.json()["is_archived"] is False
    assert [note["id"] for note in client.get("/api/notes").json()] == [note_id]


def test_import_categories_tags_and_stats(services) -> None:
    response = client.post("/api/categories", json={"name": "Home"})
    assert response.status_code == 201
    category_id = response.json()["id"]

    response = client.post("/api/categories", json={"name": "Home"})
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"

    response = client.post(
        "/api/notes/import",
        json=[
            {"title": "Plumbing", "category_id": category_id, "tags": ["repairs"]},
            {"title": "Garden", "is_favorite": True, "tags": ["repairs", "outdoor"]},
        ],
    )
    assert response.status_code == 201
    assert [note["title"] for note in response.json()] == ["Plumbing", "Garden"]

    assert [c["name"] for c in client.get("/api/categories").json()] == ["Home"]
    tags = client.get("/api/tags").json()
    assert [(tag["name"], tag["count"]) for tag in tags] == [("repairs", 2), ("outdoor", 1)]

    stats = client.get("/api/notes/stats").json()
    assert stats == {
        "total_notes": 2,
        "favorite_notes": 1,
        "total_categories": 1,
        "total_tags": 2,
    }

    response = client.get("/api/search", params={"category_id": category_id})
    assert [hit["title"] for hit in response.json()] == ["Plumbing"]
