"""Semantic search - embed a query and rank stored chunks against it."""

import logging

from paperlens.db.repositories import VectorStore
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.papers import SearchResult
from paperlens.retrieval.similarity import rank

logger = logging.getLogger(__name__)


async def search_papers(
    *,
    query: str,
    store: VectorStore,
    embedder: EmbeddingGateway,
    min_score: float = 0.7,
    top_k: int = 10,
) -> list[SearchResult]:
    """Search stored chunks by semantic similarity to a query.

    A blank query returns [] without calling the embedding gateway. An empty
    store also returns [].

    Args:
        query: Free-text search query
        store: Vector store to scan
        embedder: Embedding gateway for the query
        min_score: Exclusive minimum similarity for a result
        top_k: Maximum number of results

    Returns:
        Search results sorted by relevance (descending score)

    Raises:
        EmbeddingUnavailable: If the query cannot be embedded
    """
    if not query or not query.strip():
        return []

    query_vector = await embedder.embed(query)
    ranked = rank(query_vector, store.scan_chunks(), min_score=min_score, top_k=top_k)

    logger.info(f"Search matched {len(ranked)} chunks (min_score={min_score}, top_k={top_k})")

    return [
        SearchResult(
            paper_id=scored.paper.id,
            paper_title=scored.paper.title,
            authors=scored.paper.authors,
            excerpt=scored.chunk.chunk_text,
            relevance_score=scored.score,
        )
        for scored in ranked
    ]
