"""Paper endpoints - create, list, get, delete, chunks."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from paperlens.api.dependencies import get_app_settings, get_embedder, get_extractor, get_store
from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.docs.ingest import ingest_paper
from paperlens.errors import NotFound
from paperlens.extraction.extractor import StructuredExtractor
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.papers import Paper

router = APIRouter(prefix="/papers", tags=["papers"])


class CreatePaperRequest(BaseModel):
    """Request body for POST /papers."""

    title: str = Field(..., min_length=1, max_length=500, description="Paper title")
    authors: str = Field(..., min_length=1, description="Free-text author list")
    abstract: str = Field(..., description="Paper abstract")
    full_text: str = Field(..., min_length=1, description="Full paper text")


class ChunkResponse(BaseModel):
    """Chunk without its embedding vector."""

    id: UUID
    paper_id: UUID
    chunk_index: int
    chunk_text: str


class DeletePaperResponse(BaseModel):
    """Response for DELETE /papers/{paper_id}."""

    success: bool


@router.get("", response_model=list[Paper])
async def list_papers(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[Paper]:
    """List all papers, newest first."""
    return store.list_papers()


@router.get("/{paper_id}", response_model=Paper)
async def get_paper(
    paper_id: UUID,
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> Paper:
    """Get one paper."""
    paper = store.get_paper(paper_id)
    if paper is None:
        raise NotFound(paper_id)
    return paper


@router.post("", response_model=Paper, status_code=status.HTTP_201_CREATED)
async def create_paper(
    request: CreatePaperRequest,
    store: Annotated[InMemoryStore, Depends(get_store)],
    embedder: Annotated[EmbeddingGateway, Depends(get_embedder)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Paper:
    """Create a paper: chunk its full text, embed every chunk, store it.

    Returns:
        The processed paper
    """
    return await ingest_paper(
        title=request.title,
        authors=request.authors,
        abstract=request.abstract,
        full_text=request.full_text,
        store=store,
        embedder=embedder,
        max_chunk_chars=settings.chunk_max_chars,
    )


@router.delete("/{paper_id}", response_model=DeletePaperResponse)
async def delete_paper(
    paper_id: UUID,
    store: Annotated[InMemoryStore, Depends(get_store)],
    extractor: Annotated[StructuredExtractor, Depends(get_extractor)],
) -> DeletePaperResponse:
    """Delete a paper with its chunks and extraction results."""
    store.delete_paper(paper_id)
    extractor.forget(paper_id)
    return DeletePaperResponse(success=True)


@router.get("/{paper_id}/chunks", response_model=list[ChunkResponse])
async def list_chunks(
    paper_id: UUID,
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[ChunkResponse]:
    """List a paper's chunks in order, without vectors."""
    if store.get_paper(paper_id) is None:
        raise NotFound(paper_id)

    return [
        ChunkResponse(
            id=chunk.id,
            paper_id=chunk.paper_id,
            chunk_index=chunk.chunk_index,
            chunk_text=chunk.chunk_text,
        )
        for chunk in store.get_chunks(paper_id)
    ]
