"""QA endpoints - POST /qa, GET /conversations."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from paperlens.api.dependencies import get_app_settings, get_embedder, get_generator, get_store
from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.llm.client import GenerationClient
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.answer import Conversation
from paperlens.rag.answerer import answer_question

router = APIRouter(tags=["qa"])


class QuestionRequest(BaseModel):
    """Request body for POST /qa."""

    question: str = Field("", max_length=2000, description="Natural-language question")


@router.post("/qa", response_model=Conversation)
async def ask_question(
    request: QuestionRequest,
    store: Annotated[InMemoryStore, Depends(get_store)],
    embedder: Annotated[EmbeddingGateway, Depends(get_embedder)],
    generator: Annotated[GenerationClient, Depends(get_generator)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Conversation:
    """Answer a question from the uploaded papers with citations."""
    return await answer_question(
        question=request.question,
        store=store,
        embedder=embedder,
        generator=generator,
        settings=settings,
    )


@router.get("/conversations", response_model=list[Conversation])
async def list_conversations(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[Conversation]:
    """List recorded conversations, newest first."""
    return store.list_conversations()
