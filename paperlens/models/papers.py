"""Paper and chunk domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PaperStatus(str, Enum):
    """Processing status of an uploaded paper."""

    pending = "pending"
    processed = "processed"


class Paper(BaseModel):
    """Uploaded research paper."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    title: str
    authors: str
    abstract: str
    full_text: str
    uploaded_at: datetime
    status: PaperStatus = PaperStatus.pending


class TextChunk(BaseModel):
    """Retrievable passage of a paper with its embedding vector."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    paper_id: UUID
    chunk_text: str
    chunk_index: int = Field(..., ge=0)  # 0-based, contiguous per paper
    embedding: list[float] = Field(..., repr=False)


class SearchResult(BaseModel):
    """Ranked chunk returned by exploratory search."""

    paper_id: UUID
    paper_title: str
    authors: str
    excerpt: str
    relevance_score: float
