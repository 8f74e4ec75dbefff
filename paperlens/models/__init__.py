"""Models package - re-exports for convenience."""

from paperlens.models.answer import Citation, Conversation
from paperlens.models.extraction import Entity, EntityType, PicoElement
from paperlens.models.llm_output import (
    AnswerPayload,
    EntityPayload,
    PicoPayload,
    decode_model_output,
)
from paperlens.models.papers import Paper, PaperStatus, SearchResult, TextChunk

__all__ = [
    # Papers
    "Paper",
    "PaperStatus",
    "TextChunk",
    "SearchResult",
    # Answers
    "Citation",
    "Conversation",
    # Extraction
    "Entity",
    "EntityType",
    "PicoElement",
    # Generation output
    "AnswerPayload",
    "EntityPayload",
    "PicoPayload",
    "decode_model_output",
]
