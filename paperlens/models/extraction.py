"""Structured extraction records (PICO elements and biomedical entities)."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    """Biomedical entity category."""

    disease = "disease"
    drug = "drug"
    protein = "protein"
    gene = "gene"


class PicoElement(BaseModel):
    """PICO summary of a paper, one confidence score per element."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    paper_id: UUID
    population: str | None = None
    intervention: str | None = None
    comparison: str | None = None
    outcome: str | None = None
    population_confidence: float = Field(0.0, ge=0.0, le=1.0)
    intervention_confidence: float = Field(0.0, ge=0.0, le=1.0)
    comparison_confidence: float = Field(0.0, ge=0.0, le=1.0)
    outcome_confidence: float = Field(0.0, ge=0.0, le=1.0)
    extracted_at: datetime


class Entity(BaseModel):
    """Named biomedical entity found in a paper."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    paper_id: UUID
    type: EntityType
    text: str
    frequency: int = Field(1, ge=1)
    context: str | None = None
