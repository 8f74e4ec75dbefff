"""Health check endpoint.

Reports which gateway implementations are active and the size of the
in-memory store.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from paperlens.api.dependencies import get_embedder, get_generator, get_store
from paperlens.db.inmemory import InMemoryStore
from paperlens.llm.client import GenerationClient
from paperlens.llm.embeddings import EmbeddingGateway

router = APIRouter()


@router.get("/health")
async def health(
    store: Annotated[InMemoryStore, Depends(get_store)],
    embedder: Annotated[EmbeddingGateway, Depends(get_embedder)],
    generator: Annotated[GenerationClient, Depends(get_generator)],
) -> dict[str, Any]:
    """Health check.

    Returns:
        200 with gateway implementation names and store record counts
    """
    return {
        "status": "ok",
        "components": {
            "embeddings": type(embedder).__name__,
            "generation": type(generator).__name__,
        },
        "store": store.counts(),
    }
