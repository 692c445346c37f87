import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.services.search_service import SearchService, get_search_service

client = TestClient(app)


@pytest.fixture
def service(corpus):
    search_service = SearchService(corpus, default_limit=50, suggestion_limit=5)
    app.dependency_overrides[get_search_service] = lambda: search_service
    yield search_service
    app.dependency_overrides = {}


def test_search_returns_scored_hits(service) -> None:
    response = client.get("/api/search", params={"q": "concurrency"})

    assert response.status_code == 200
    data = response.json()
    assert [hit["id"] for hit in data] == [1]
    assert data[0]["score"] == 7
    assert data[0]["title"] == "Go Routines"


def test_search_without_query_or_filters_lists_store(service) -> None:
    response = client.get("/api/search")

    assert response.status_code == 200
    data = response.json()
    assert [hit["id"] for hit in data] == [1, 2]
    assert all(hit["score"] is None for hit in data)


def test_search_with_structured_filters(service) -> None:
    response = client.get("/api/search", params={"is_favorite": "true"})
    assert [hit["id"] for hit in response.json()] == [2]

    response = client.get("/api/search", params=[("tag_ids", "9"), ("tag_ids", "11")])
    assert [hit["id"] for hit in response.json()] == [2]


def test_search_with_open_ended_date_range(service, t2) -> None:
    response = client.get("/api/search", params={"date_from": t2.isoformat()})

    assert response.status_code == 200
    assert [hit["id"] for hit in response.json()] == [2]

    response = client.get("/api/search", params={"date_to": "2025-01-11T00:00:00Z"})

    assert [hit["id"] for hit in response.json()] == [1]


def test_search_limit_and_sort(service) -> None:
    response = client.get("/api/search", params={"q": "o", "sort_by": "title", "limit": 1})

    assert response.status_code == 200
    assert [hit["id"] for hit in response.json()] == [1]


@pytest.mark.parametrize(
    "params",
    [
        {"q": "rust", "date_from": "yesterday"},
        {"q": "rust", "sort_by": "popularity"},
        {"q": "rust", "limit": 0},
        {"q": "rust", "date_from": "2025-02-01T00:00:00Z", "date_to": "2025-01-01T00:00:00Z"},
    ],
)
def test_search_rejects_malformed_options(service, params) -> None:
    response = client.get("/api/search", params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["message"] == "Invalid search options"
    assert body["detail"]["errors"]


def test_search_reports_unavailable_corpus(service, corpus) -> None:
    corpus.error = RuntimeError("database is locked")

    response = client.get("/api/search", params={"q": "rust"})

    assert response.status_code == 503
    assert response.json()["error"] == "corpus_unavailable"


def test_suggestions(service) -> None:
    response = client.get("/api/search/suggestions", params={"q": "sys", "limit": 5})

    assert response.status_code == 200
    assert response.json() == ["systems"]


def test_suggestions_short_query(service) -> None:
    response = client.get("/api/search/suggestions", params={"q": "s"})

    assert response.status_code == 200
    assert response.json() == []


def test_suggestions_reject_non_positive_limit(service) -> None:
    response = client.get("/api/search/suggestions", params={"q": "rust", "limit": 0})

    assert response.status_code == 400
    assert response.json()["message"] == "Suggestion limit must be a positive integer"


def test_index_stats_and_rebuild(service, corpus, make_note) -> None:
    response = client.get("/api/index/stats")

    assert response.status_code == 200
    assert response.json() == {"entry_count": 2, "total_terms": 8, "mean_terms_per_entry": 4.0}

    corpus.notes.append(make_note(3, "Zig Comptime"))
    response = client.post("/api/index/rebuild")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["stats"]["entry_count"] == 3


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
