"""Search endpoint - GET /search."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from paperlens.api.dependencies import get_app_settings, get_embedder, get_store
from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.papers import SearchResult
from paperlens.retrieval.search import search_papers

router = APIRouter(tags=["search"])


@router.get("/search", response_model=list[SearchResult])
async def search(
    store: Annotated[InMemoryStore, Depends(get_store)],
    embedder: Annotated[EmbeddingGateway, Depends(get_embedder)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    query: Annotated[str, Query(max_length=1000)] = "",
) -> list[SearchResult]:
    """Semantic search over stored chunks.

    A missing or blank query returns an empty list.
    """
    return await search_papers(
        query=query,
        store=store,
        embedder=embedder,
        min_score=settings.search_min_score,
        top_k=settings.search_top_k,
    )
