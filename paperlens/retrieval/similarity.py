"""Cosine similarity ranking over a flat corpus snapshot."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from paperlens.db.repositories import CorpusEntry
from paperlens.errors import DimensionMismatch
from paperlens.models.papers import Paper, TextChunk
from paperlens.utils.metrics import ranking_skipped_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredChunk:
    """Corpus entry with its similarity to the query."""

    chunk: TextChunk
    paper: Paper
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatch(expected=len(a), actual=len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def rank(
    query_vector: Sequence[float],
    corpus: Sequence[CorpusEntry],
    *,
    min_score: float,
    top_k: int,
) -> list[ScoredChunk]:
    """Rank corpus entries by cosine similarity to the query.

    Scoring strategy:
    - Score every entry; entries whose vector length differs from the query
      are skipped (logged and counted), the scan continues
    - Keep entries with score strictly greater than min_score
    - Sort by score descending; the sort is stable, so equal scores keep scan order
    - Truncate to top_k

    Args:
        query_vector: Embedded query
        corpus: Snapshot of stored chunks with parent papers
        min_score: Exclusive lower bound on score
        top_k: Maximum number of results (<= 0 gives [])

    Returns:
        Scored chunks, highest score first
    """
    if top_k <= 0:
        return []

    scored: list[ScoredChunk] = []
    for entry in corpus:
        try:
            score = cosine_similarity(query_vector, entry.chunk.embedding)
        except DimensionMismatch as e:
            ranking_skipped_total.labels(reason="dimension_mismatch").inc()
            logger.warning(f"Skipping chunk {entry.chunk.id}: {e}")
            continue

        if score > min_score:
            scored.append(ScoredChunk(chunk=entry.chunk, paper=entry.paper, score=score))

    scored.sort(key=lambda s: s.score, reverse=True)

    return scored[:top_k]
