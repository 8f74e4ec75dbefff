"""Paper ingestion - chunk, embed and store a paper."""

import contextlib
import logging
from datetime import datetime, timezone
from uuid import uuid4

from paperlens.db.inmemory import InMemoryStore
from paperlens.docs.chunker import chunk_text
from paperlens.errors import NotFound, ValidationFailure
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.papers import Paper, PaperStatus, TextChunk
from paperlens.utils.metrics import ingested_chunks_total

logger = logging.getLogger(__name__)


async def ingest_paper(
    *,
    title: str,
    authors: str,
    abstract: str,
    full_text: str,
    store: InMemoryStore,
    embedder: EmbeddingGateway,
    max_chunk_chars: int = 500,
) -> Paper:
    """Ingest a paper: register it, embed its chunks one by one, store them.

    The paper is visible as ``pending`` while its chunks are embedded.
    Embedding calls are issued sequentially. Chunks are inserted together with
    the switch to ``processed``, so a scan never sees a partial chunk set. If
    embedding fails or is cancelled the pending paper is removed and the
    original error propagates.

    Args:
        title: Paper title
        authors: Free-text author list
        abstract: Paper abstract
        full_text: Full paper text; this is what gets chunked
        store: Shared in-memory store
        embedder: Embedding gateway
        max_chunk_chars: Soft chunk size limit

    Returns:
        The processed Paper

    Raises:
        ValidationFailure: If title or full text is blank
        EmbeddingUnavailable: If any chunk cannot be embedded
    """
    if not title.strip():
        raise ValidationFailure("Paper title must not be blank")
    if not full_text.strip():
        raise ValidationFailure("Paper full text must not be blank")

    paper = store.add_paper(
        Paper(
            id=uuid4(),
            title=title,
            authors=authors,
            abstract=abstract,
            full_text=full_text,
            uploaded_at=datetime.now(timezone.utc),
            status=PaperStatus.pending,
        )
    )

    passages = chunk_text(full_text, max_chunk_chars)
    chunks: list[TextChunk] = []

    try:
        for index, passage in enumerate(passages):
            embedding = await embedder.embed(passage)
            chunks.append(
                TextChunk(
                    id=uuid4(),
                    paper_id=paper.id,
                    chunk_text=passage,
                    chunk_index=index,
                    embedding=embedding,
                )
            )
    except BaseException:
        logger.error(f"Embedding did not complete for paper {paper.id}; aborting ingestion")
        # A concurrent delete may already have removed it
        with contextlib.suppress(NotFound):
            store.delete_paper(paper.id)
        raise

    processed = store.insert_chunks(paper.id, chunks)
    ingested_chunks_total.inc(len(chunks))
    logger.info(f"Ingested paper {paper.id} ({title!r}) with {len(chunks)} chunks")

    return processed
