"""Retrieval-augmented question answering with traceable citations.

Per question the pipeline moves through the stages of ``AnswerStage``:

    embedding -> ranking -> context_empty | context_built
              -> generation -> citation_mapping -> recorded

Context excerpts are numbered 1..n in rank order. The model answers with the
numbers it cited, and each number is mapped back to the exact chunk that was
placed in the context.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.errors import (
    AnswerFailed,
    EmbeddingUnavailable,
    MalformedGenerationOutput,
    ValidationFailure,
)
from paperlens.llm.client import GenerationClient
from paperlens.llm.embeddings import EmbeddingGateway
from paperlens.models.answer import Citation, Conversation
from paperlens.models.llm_output import AnswerPayload, decode_model_output
from paperlens.retrieval.similarity import ScoredChunk, rank
from paperlens.utils.metrics import qa_answers_total

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = (
    "I couldn't find relevant information in your uploaded papers to answer this question."
)
NO_ANSWER_FALLBACK = "I couldn't generate an answer based on the provided context."
TRUNCATION_MARKER = "..."

SYSTEM_PROMPT = (
    "You are a biomedical research assistant. Answer questions based on provided "
    "research excerpts and always cite your sources."
)


class AnswerStage(str, Enum):
    """Stages a question passes through."""

    embedding = "embedding"
    ranking = "ranking"
    context_empty = "context_empty"
    context_built = "context_built"
    generation = "generation"
    citation_mapping = "citation_mapping"
    recorded = "recorded"


def format_excerpt(scored: ScoredChunk, number: int) -> str:
    """Render one numbered context block."""
    return f'[{number}] From "{scored.paper.title}":\n{scored.chunk.chunk_text}'


def build_context(ranked: Sequence[ScoredChunk], max_chars: int) -> tuple[list[ScoredChunk], str]:
    """Build the numbered context block within a character budget.

    Blocks are added in rank order while the joined context stays within
    ``max_chars``. The first block is always included, whatever its size.

    Returns:
        (chunks included in the context, in numbering order; rendered context)
    """
    included: list[ScoredChunk] = []
    blocks: list[str] = []
    length = 0

    for scored in ranked:
        block = format_excerpt(scored, len(included) + 1)
        separator = 2 if blocks else 0  # "\n\n" between blocks
        if included and length + separator + len(block) > max_chars:
            break
        included.append(scored)
        blocks.append(block)
        length += separator + len(block)

    return included, "\n\n".join(blocks)


def build_user_prompt(question: str, context: str) -> str:
    """Build the answer-generation prompt."""
    return f"""Based on the following research paper excerpts, answer the question. Cite sources using [1], [2], etc.

Research excerpts:
{context}

Question: {question}

Provide a comprehensive answer with proper citations in JSON format:
{{
  "answer": "Your answer with citations like [1], [2]",
  "citedIndices": [1, 2]
}}"""


def truncate_excerpt(text: str, max_chars: int = 200) -> str:
    """Cut text to ``max_chars`` characters, appending a marker when cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def map_citations(
    cited_indices: Sequence[int],
    context_chunks: Sequence[ScoredChunk],
    excerpt_chars: int = 200,
) -> list[Citation]:
    """Map 1-based cited indices to citations of the context chunks.

    Order and duplicates follow ``cited_indices``; indices outside
    ``[1, len(context_chunks)]`` are dropped.
    """
    citations: list[Citation] = []
    for index in cited_indices:
        if not 1 <= index <= len(context_chunks):
            logger.debug(f"Dropping out-of-range citation index {index}")
            continue
        scored = context_chunks[index - 1]
        citations.append(
            Citation(
                paper_id=scored.paper.id,
                paper_title=scored.paper.title,
                excerpt=truncate_excerpt(scored.chunk.chunk_text, excerpt_chars),
            )
        )
    return citations


def _conversation(question: str, answer: str, citations: list[Citation]) -> Conversation:
    return Conversation(
        id=uuid4(),
        question=question,
        answer=answer,
        citations=citations,
        created_at=datetime.now(timezone.utc),
    )


async def answer_question(
    *,
    question: str,
    store: InMemoryStore,
    embedder: EmbeddingGateway,
    generator: GenerationClient,
    settings: Settings,
) -> Conversation:
    """Answer a question from stored papers and record the exchange.

    When no chunk clears the QA threshold the fixed no-context answer is
    returned without calling generation and without recording it.

    Args:
        question: Natural-language question
        store: Shared in-memory store (chunks are read, the conversation is appended)
        embedder: Embedding gateway for the question
        generator: Generation gateway for the answer
        settings: Thresholds, context budget and excerpt length

    Returns:
        The Conversation (recorded unless no context was found)

    Raises:
        ValidationFailure: If the question is blank
        AnswerFailed: If the question cannot be embedded
        GenerationUnavailable: If generation fails (nothing is recorded)
    """
    if not question or not question.strip():
        raise ValidationFailure("Question is required")

    try:
        query_vector = await embedder.embed(question)
    except EmbeddingUnavailable as e:
        qa_answers_total.labels(outcome="failed").inc()
        raise AnswerFailed(f"Could not embed question: {e}", stage=AnswerStage.embedding.value) from e

    ranked = rank(
        query_vector,
        store.scan_chunks(),
        min_score=settings.qa_min_score,
        top_k=settings.qa_top_k,
    )

    if not ranked:
        logger.info(f"QA stage={AnswerStage.context_empty.value}: no chunk above {settings.qa_min_score}")
        qa_answers_total.labels(outcome="context_empty").inc()
        return _conversation(question, NO_CONTEXT_ANSWER, [])

    context_chunks, context = build_context(ranked, settings.qa_context_max_chars)
    logger.info(
        f"QA stage={AnswerStage.context_built.value}: "
        f"{len(context_chunks)}/{len(ranked)} excerpts, {len(context)} chars"
    )

    try:
        raw = await generator.generate_json(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(question, context),
            response_model=AnswerPayload,
        )
    except MalformedGenerationOutput as e:
        logger.warning(f"QA stage={AnswerStage.generation.value}: unparsable output, using defaults: {e}")
        raw = {}

    payload = decode_model_output(AnswerPayload, raw)
    citations = map_citations(payload.cited_indices, context_chunks, settings.citation_excerpt_chars)

    conversation = store.add_conversation(
        _conversation(question, payload.answer or NO_ANSWER_FALLBACK, citations)
    )
    qa_answers_total.labels(outcome="answered").inc()
    logger.info(
        f"QA stage={AnswerStage.recorded.value}: "
        f"conversation {conversation.id} with {len(citations)} citations"
    )

    return conversation
