"""Integration tests for extraction routes."""

from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.main import create_app

PAPER = {
    "title": "Metformin trial",
    "authors": "Smith J",
    "abstract": "Adults with type 2 diabetes were randomized.",
    "full_text": "Metformin reduced HbA1c compared with placebo.",
}

RESPONSE = {
    # Both payload shapes in one object; each decoder ignores the other's keys
    "population": "Adults with type 2 diabetes",
    "intervention": "Metformin",
    "comparison": "Placebo",
    "outcome": "HbA1c",
    "populationConfidence": 0.9,
    "interventionConfidence": 0.9,
    "comparisonConfidence": 0.7,
    "outcomeConfidence": 0.8,
    "diseases": ["type 2 diabetes"],
    "drugs": ["metformin"],
}


@pytest.fixture
def generator(generator_factory: Any) -> Any:
    return generator_factory(RESPONSE)


@pytest.fixture
def client(store: InMemoryStore, embedder: Any, generator: Any, settings: Settings) -> TestClient:
    app = create_app(settings, store=store, embedder=embedder, generator=generator)
    return TestClient(app)


@pytest.fixture
def paper_id(client: TestClient) -> str:
    return client.post("/api/papers", json=PAPER).json()["id"]


def test_extract_pico(client: TestClient, paper_id: str) -> None:
    response = client.post(f"/api/papers/{paper_id}/extract-pico")

    assert response.status_code == 200
    data = response.json()
    assert data["paper_id"] == paper_id
    assert data["intervention"] == "Metformin"
    assert data["comparison_confidence"] == 0.7


def test_extract_pico_is_idempotent(client: TestClient, paper_id: str, generator: Any) -> None:
    first = client.post(f"/api/papers/{paper_id}/extract-pico").json()
    second = client.post(f"/api/papers/{paper_id}/extract-pico").json()

    assert second == first
    assert len(generator.calls) == 1
    assert client.get("/api/pico-elements").json() == [first]


def test_extract_entities(client: TestClient, paper_id: str) -> None:
    response = client.post(f"/api/papers/{paper_id}/extract-entities")

    assert response.status_code == 200
    assert [(e["type"], e["text"], e["frequency"]) for e in response.json()] == [
        ("disease", "type 2 diabetes", 1),
        ("drug", "metformin", 1),
    ]
    assert len(client.get("/api/entities").json()) == 2


@pytest.mark.parametrize("action", ["extract-pico", "extract-entities"])
def test_extract_for_unknown_paper_returns_404(client: TestClient, generator: Any, action: str) -> None:
    response = client.post(f"/api/papers/{uuid4()}/{action}")

    assert response.status_code == 404
    assert response.json() == {"error": "Paper not found"}
    assert generator.calls == []


def test_delete_paper_removes_extractions(client: TestClient, paper_id: str) -> None:
    client.post(f"/api/papers/{paper_id}/extract-pico")
    client.post(f"/api/papers/{paper_id}/extract-entities")

    client.delete(f"/api/papers/{paper_id}")

    assert client.get("/api/pico-elements").json() == []
    assert client.get("/api/entities").json() == []
