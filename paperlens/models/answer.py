"""Question-answering domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Citation(BaseModel):
    """Pointer from an answer back to the excerpt that supports it."""

    model_config = ConfigDict(frozen=True)

    paper_id: UUID
    paper_title: str
    excerpt: str


class Conversation(BaseModel):
    """Recorded question/answer exchange. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    question: str
    answer: str
    citations: list[Citation] = Field(default_factory=list)  # first-cited first
    created_at: datetime
