"""Integration tests for paper API routes."""

from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.main import create_app

PAPER = {
    "title": "Metformin in type 2 diabetes",
    "authors": "Smith J, Doe A",
    "abstract": "A randomized controlled trial.",
    "full_text": "Metformin reduced HbA1c. Insulin needs fell. Aspirin was not studied.",
}


@pytest.fixture
def client(store: InMemoryStore, embedder: Any, generator_factory: Any, settings: Settings) -> TestClient:
    """Test client over an app with fake gateways."""
    app = create_app(settings, store=store, embedder=embedder, generator=generator_factory({}))
    return TestClient(app)


def test_create_paper_returns_processed_paper(client: TestClient, store: InMemoryStore) -> None:
    response = client.post("/api/papers", json=PAPER)

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == PAPER["title"]
    assert data["authors"] == PAPER["authors"]
    assert data["status"] == "processed"
    assert "uploaded_at" in data
    assert len(store.scan_chunks()) == 1


def test_list_papers_newest_first(client: TestClient) -> None:
    first = client.post("/api/papers", json={**PAPER, "title": "First"}).json()
    second = client.post("/api/papers", json={**PAPER, "title": "Second"}).json()

    response = client.get("/api/papers")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [second["id"], first["id"]]


def test_get_paper(client: TestClient) -> None:
    created = client.post("/api/papers", json=PAPER).json()

    response = client.get(f"/api/papers/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_unknown_paper_returns_404(client: TestClient) -> None:
    response = client.get(f"/api/papers/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"error": "Paper not found"}


def test_get_paper_with_malformed_id_returns_422(client: TestClient) -> None:
    assert client.get("/api/papers/not-a-uuid").status_code == 422


def test_list_chunks_omits_embeddings(client: TestClient) -> None:
    created = client.post(
        "/api/papers", json={**PAPER, "full_text": "A" * 300 + ". " + "B" * 300 + "."}
    ).json()

    response = client.get(f"/api/papers/{created['id']}/chunks")

    assert response.status_code == 200
    chunks = response.json()
    assert [c["chunk_index"] for c in chunks] == [0, 1]
    assert all("embedding" not in c for c in chunks)
    assert chunks[1]["chunk_text"] == "B" * 300 + "."


def test_chunks_of_unknown_paper_returns_404(client: TestClient) -> None:
    assert client.get(f"/api/papers/{uuid4()}/chunks").status_code == 404


def test_delete_paper_cascades(client: TestClient, store: InMemoryStore) -> None:
    created = client.post("/api/papers", json=PAPER).json()

    response = client.delete(f"/api/papers/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get(f"/api/papers/{created['id']}").status_code == 404
    assert store.scan_chunks() == []
    assert client.delete(f"/api/papers/{created['id']}").status_code == 404


def test_blank_title_returns_400(client: TestClient) -> None:
    response = client.post("/api/papers", json={**PAPER, "title": "   "})

    assert response.status_code == 400
    assert "error" in response.json()


def test_missing_full_text_returns_422(client: TestClient) -> None:
    body = {key: value for key, value in PAPER.items() if key != "full_text"}

    assert client.post("/api/papers", json=body).status_code == 422


def test_embedding_failure_returns_503_and_stores_nothing(
    store: InMemoryStore, embedder_factory: Any, generator_factory: Any, settings: Settings
) -> None:
    app = create_app(
        settings,
        store=store,
        embedder=embedder_factory(fail_on="Insulin"),
        generator=generator_factory({}),
    )
    client = TestClient(app)

    response = client.post("/api/papers", json={**PAPER, "full_text": "A" * 490 + ". Insulin needs fell."})

    assert response.status_code == 503
    assert response.json() == {"error": "Embedding service unavailable"}
    assert client.get("/api/papers").json() == []
