"""Unit tests for exploratory semantic search."""

from typing import Any

import pytest

from paperlens.db.inmemory import InMemoryStore
from paperlens.docs.ingest import ingest_paper
from paperlens.retrieval.search import search_papers


async def add_paper(store: InMemoryStore, embedder: Any, title: str, text: str):
    return await ingest_paper(
        title=title,
        authors="Smith J",
        abstract="",
        full_text=text,
        store=store,
        embedder=embedder,
    )


@pytest.mark.asyncio
async def test_blank_query_returns_empty_without_embedding(
    store: InMemoryStore, embedder: Any
) -> None:
    await add_paper(store, embedder, "Metformin", "Metformin works.")
    embedder.calls.clear()

    assert await search_papers(query="   ", store=store, embedder=embedder) == []
    assert embedder.calls == []


@pytest.mark.asyncio
async def test_empty_store_returns_empty(store: InMemoryStore, embedder: Any) -> None:
    assert await search_papers(query="metformin", store=store, embedder=embedder) == []


@pytest.mark.asyncio
async def test_results_carry_paper_metadata(store: InMemoryStore, embedder: Any) -> None:
    paper = await add_paper(store, embedder, "Metformin trial", "Metformin lowered glucose.")

    results = await search_papers(query="metformin", store=store, embedder=embedder)

    assert len(results) == 1
    assert results[0].paper_id == paper.id
    assert results[0].paper_title == "Metformin trial"
    assert results[0].authors == "Smith J"
    assert results[0].excerpt == "Metformin lowered glucose."
    assert results[0].relevance_score == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_threshold_and_ordering(store: InMemoryStore, embedder: Any) -> None:
    """Test that only chunks scoring above 0.7 are returned, best first."""
    await add_paper(store, embedder, "Two topics", "Metformin and HbA1c.")  # 0.707
    await add_paper(store, embedder, "Exact", "Metformin only.")  # 1.0
    await add_paper(store, embedder, "Three topics", "Metformin, HbA1c and insulin.")  # 0.577
    await add_paper(store, embedder, "Unrelated", "Statins and cholesterol.")  # 0.0

    results = await search_papers(query="metformin", store=store, embedder=embedder)

    assert [r.paper_title for r in results] == ["Exact", "Two topics"]


@pytest.mark.asyncio
async def test_top_k_limits_results(store: InMemoryStore, embedder: Any) -> None:
    for i in range(5):
        await add_paper(store, embedder, f"Paper {i}", "Metformin results.")

    results = await search_papers(query="metformin", store=store, embedder=embedder, top_k=2)

    assert [r.paper_title for r in results] == ["Paper 0", "Paper 1"]
