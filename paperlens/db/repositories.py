"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from paperlens.models.answer import Conversation
from paperlens.models.extraction import Entity, PicoElement
from paperlens.models.papers import Paper, TextChunk


@dataclass(frozen=True)
class CorpusEntry:
    """Stored chunk joined with its (existing) parent paper."""

    chunk: TextChunk
    paper: Paper


class PaperRepository(Protocol):
    """Repository for paper operations."""

    def add_paper(self, paper: Paper) -> Paper:
        """Store a new paper."""
        ...

    def get_paper(self, paper_id: UUID) -> Paper | None:
        """Get paper by ID, or None if not found."""
        ...

    def list_papers(self) -> list[Paper]:
        """List all papers, newest upload first."""
        ...

    def delete_paper(self, paper_id: UUID) -> None:
        """Delete a paper together with everything it owns.

        Raises:
            NotFound: If the paper does not exist
        """
        ...


class VectorStore(Protocol):
    """Flat collection of embedded chunks."""

    def insert_chunks(self, paper_id: UUID, chunks: list[TextChunk]) -> Paper:
        """Insert all chunks of a paper and mark the paper processed.

        Args:
            paper_id: Parent paper ID
            chunks: Chunks with indices 0..N-1

        Returns:
            The updated (processed) paper

        Raises:
            NotFound: If the parent paper does not exist
        """
        ...

    def scan_chunks(self) -> list[CorpusEntry]:
        """Snapshot every stored chunk whose parent paper exists."""
        ...

    def get_chunks(self, paper_id: UUID) -> list[TextChunk]:
        """Get a paper's chunks in index order."""
        ...


class ExtractionRepository(Protocol):
    """Repository for PICO and entity extraction results."""

    def get_pico(self, paper_id: UUID) -> PicoElement | None:
        """Get the PICO record of a paper, or None if never extracted."""
        ...

    def add_pico_if_absent(self, pico: PicoElement) -> PicoElement:
        """Store a PICO record unless one exists; return the stored record.

        Raises:
            NotFound: If the paper does not exist
        """
        ...

    def list_pico(self) -> list[PicoElement]:
        """List all PICO records."""
        ...

    def get_entities(self, paper_id: UUID) -> list[Entity] | None:
        """Get a paper's entities, or None if never extracted."""
        ...

    def add_entities_if_absent(self, paper_id: UUID, entities: list[Entity]) -> list[Entity]:
        """Store a paper's entities unless already extracted; return the stored list.

        Raises:
            NotFound: If the paper does not exist
        """
        ...

    def list_entities(self) -> list[Entity]:
        """List all entities."""
        ...


class ConversationRepository(Protocol):
    """Append-only repository for question/answer exchanges."""

    def add_conversation(self, conversation: Conversation) -> Conversation:
        """Record a conversation."""
        ...

    def list_conversations(self) -> list[Conversation]:
        """List conversations, newest first."""
        ...
