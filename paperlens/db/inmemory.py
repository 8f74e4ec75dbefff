"""In-memory implementation of the repository interfaces.

One ``InMemoryStore`` is created per process and shared by reference. A single
coarse lock guards every map: writers never interleave, and a scan copies the
collection under the lock so scoring can run on the snapshot without blocking
inserts.
"""

import logging
import threading
from uuid import UUID

from paperlens.db.repositories import CorpusEntry
from paperlens.errors import NotFound
from paperlens.models.answer import Conversation
from paperlens.models.extraction import Entity, PicoElement
from paperlens.models.papers import Paper, PaperStatus, TextChunk

logger = logging.getLogger(__name__)


class InMemoryStore:
    """In-memory papers, vector store, extraction results and conversations."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._papers: dict[UUID, Paper] = {}
        self._chunks: dict[UUID, TextChunk] = {}
        self._pico: dict[UUID, PicoElement] = {}  # keyed by paper_id
        self._entities: dict[UUID, list[Entity]] = {}  # keyed by paper_id
        self._conversations: list[Conversation] = []

    # Papers

    def add_paper(self, paper: Paper) -> Paper:
        """Store a new paper."""
        with self._lock:
            if paper.id in self._papers:
                raise ValueError(f"Paper {paper.id} already exists")
            self._papers[paper.id] = paper
        return paper

    def get_paper(self, paper_id: UUID) -> Paper | None:
        """Get paper by ID."""
        with self._lock:
            return self._papers.get(paper_id)

    def list_papers(self) -> list[Paper]:
        """List papers, newest upload first (later inserts first on equal timestamps)."""
        with self._lock:
            papers = list(reversed(self._papers.values()))
        return sorted(papers, key=lambda p: p.uploaded_at, reverse=True)

    def delete_paper(self, paper_id: UUID) -> None:
        """Delete a paper and its chunks, PICO record and entities in one step."""
        with self._lock:
            if paper_id not in self._papers:
                raise NotFound(paper_id)

            del self._papers[paper_id]
            chunk_ids = [cid for cid, chunk in self._chunks.items() if chunk.paper_id == paper_id]
            for chunk_id in chunk_ids:
                del self._chunks[chunk_id]
            self._pico.pop(paper_id, None)
            self._entities.pop(paper_id, None)

        logger.info(f"Deleted paper {paper_id} with {len(chunk_ids)} chunks")

    # Vector store

    def insert_chunks(self, paper_id: UUID, chunks: list[TextChunk]) -> Paper:
        """Insert a paper's chunks and mark it processed."""
        indices = [chunk.chunk_index for chunk in chunks]
        if indices != list(range(len(chunks))):
            raise ValueError("Chunk indices must be contiguous from 0 in order")
        if any(chunk.paper_id != paper_id for chunk in chunks):
            raise ValueError("All chunks must belong to the target paper")

        with self._lock:
            paper = self._papers.get(paper_id)
            if paper is None:
                raise NotFound(paper_id)
            if any(chunk.paper_id == paper_id for chunk in self._chunks.values()):
                raise ValueError(f"Paper {paper_id} already has chunks")

            for chunk in chunks:
                self._chunks[chunk.id] = chunk
            processed = paper.model_copy(update={"status": PaperStatus.processed})
            self._papers[paper_id] = processed

        return processed

    def scan_chunks(self) -> list[CorpusEntry]:
        """Snapshot all chunks joined with their parent paper."""
        with self._lock:
            return [
                CorpusEntry(chunk=chunk, paper=self._papers[chunk.paper_id])
                for chunk in self._chunks.values()
                if chunk.paper_id in self._papers
            ]

    def get_chunks(self, paper_id: UUID) -> list[TextChunk]:
        """Get a paper's chunks in index order."""
        with self._lock:
            chunks = [chunk for chunk in self._chunks.values() if chunk.paper_id == paper_id]
        return sorted(chunks, key=lambda c: c.chunk_index)

    # Extraction results

    def get_pico(self, paper_id: UUID) -> PicoElement | None:
        """Get the PICO record of a paper."""
        with self._lock:
            return self._pico.get(paper_id)

    def add_pico_if_absent(self, pico: PicoElement) -> PicoElement:
        """Store a PICO record unless one already exists (first write wins)."""
        with self._lock:
            if pico.paper_id not in self._papers:
                raise NotFound(pico.paper_id)
            return self._pico.setdefault(pico.paper_id, pico)

    def list_pico(self) -> list[PicoElement]:
        """List all PICO records."""
        with self._lock:
            return list(self._pico.values())

    def get_entities(self, paper_id: UUID) -> list[Entity] | None:
        """Get a paper's entities, or None if never extracted."""
        with self._lock:
            entities = self._entities.get(paper_id)
            return list(entities) if entities is not None else None

    def add_entities_if_absent(self, paper_id: UUID, entities: list[Entity]) -> list[Entity]:
        """Store a paper's entities unless already extracted (first write wins)."""
        with self._lock:
            if paper_id not in self._papers:
                raise NotFound(paper_id)
            stored = self._entities.setdefault(paper_id, list(entities))
            return list(stored)

    def list_entities(self) -> list[Entity]:
        """List all entities."""
        with self._lock:
            return [entity for entities in self._entities.values() for entity in entities]

    # Conversations

    def add_conversation(self, conversation: Conversation) -> Conversation:
        """Append a conversation record."""
        with self._lock:
            self._conversations.append(conversation)
        return conversation

    def list_conversations(self) -> list[Conversation]:
        """List conversations, newest first."""
        with self._lock:
            conversations = list(reversed(self._conversations))
        return sorted(conversations, key=lambda c: c.created_at, reverse=True)

    def counts(self) -> dict[str, int]:
        """Record counts per collection."""
        with self._lock:
            return {
                "papers": len(self._papers),
                "chunks": len(self._chunks),
                "pico_elements": len(self._pico),
                "entities": sum(len(entities) for entities in self._entities.values()),
                "conversations": len(self._conversations),
            }
