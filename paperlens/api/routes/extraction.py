"""Extraction endpoints - PICO elements and biomedical entities."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from paperlens.api.dependencies import get_extractor, get_store
from paperlens.db.inmemory import InMemoryStore
from paperlens.extraction.extractor import StructuredExtractor
from paperlens.models.extraction import Entity, PicoElement

router = APIRouter(tags=["extraction"])


@router.post("/papers/{paper_id}/extract-pico", response_model=PicoElement)
async def extract_pico(
    paper_id: UUID,
    extractor: Annotated[StructuredExtractor, Depends(get_extractor)],
) -> PicoElement:
    """Extract PICO elements, or return the paper's existing record."""
    return await extractor.extract_pico(paper_id)


@router.post("/papers/{paper_id}/extract-entities", response_model=list[Entity])
async def extract_entities(
    paper_id: UUID,
    extractor: Annotated[StructuredExtractor, Depends(get_extractor)],
) -> list[Entity]:
    """Extract entities, or return the paper's existing ones."""
    return await extractor.extract_entities(paper_id)


@router.get("/pico-elements", response_model=list[PicoElement])
async def list_pico_elements(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[PicoElement]:
    """List all PICO records."""
    return store.list_pico()


@router.get("/entities", response_model=list[Entity])
async def list_entities(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[Entity]:
    """List all extracted entities."""
    return store.list_entities()
