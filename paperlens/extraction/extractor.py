"""Structured extraction of PICO elements and biomedical entities.

Extraction is idempotent per paper: the first stored result wins and later
calls return it without invoking generation. A per-paper lock makes the
check-then-generate sequence atomic, so concurrent requests for the same
paper issue at most one generation call.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.errors import MalformedGenerationOutput, NotFound
from paperlens.llm.client import GenerationClient
from paperlens.models.extraction import Entity, EntityType, PicoElement
from paperlens.models.llm_output import EntityPayload, PicoPayload, decode_model_output
from paperlens.models.papers import Paper

logger = logging.getLogger(__name__)

PICO_SYSTEM_PROMPT = (
    "You are a biomedical research expert specializing in extracting PICO elements "
    "from research papers."
)

ENTITY_SYSTEM_PROMPT = (
    "You are a biomedical NLP expert specializing in named entity recognition "
    "for medical research."
)

ENTITY_CATEGORIES = ("diseases", "drugs", "proteins", "genes")


def build_pico_prompt(text: str) -> str:
    """Build the PICO extraction prompt."""
    return f"""Analyze the following biomedical research text and extract PICO elements.

PICO stands for:
- Population: The patient group or subjects being studied
- Intervention: The treatment or exposure being investigated
- Comparison: The alternative treatment or control group
- Outcome: The measured results or endpoints

Text:
{text}

Provide the extracted PICO elements and confidence scores (0.0 to 1.0) in JSON format:
{{
  "population": "extracted text or null",
  "intervention": "extracted text or null",
  "comparison": "extracted text or null",
  "outcome": "extracted text or null",
  "populationConfidence": 0.0-1.0,
  "interventionConfidence": 0.0-1.0,
  "comparisonConfidence": 0.0-1.0,
  "outcomeConfidence": 0.0-1.0
}}"""


def build_entity_prompt(text: str) -> str:
    """Build the entity extraction prompt."""
    return f"""Extract biomedical entities from the following research text.

Identify and list:
- Diseases/Conditions
- Drugs/Medications
- Proteins
- Genes

Text:
{text}

Provide the entities in JSON format:
{{
  "diseases": ["entity1", "entity2"],
  "drugs": ["entity1", "entity2"],
  "proteins": ["entity1", "entity2"],
  "genes": ["entity1", "entity2"]
}}"""


def entity_type_for(category: str) -> EntityType:
    """Derive the entity type from a plural category key ("genes" -> gene)."""
    return EntityType(category[:-1] if category.endswith("s") else category)


def entities_from_payload(paper_id: UUID, payload: EntityPayload) -> list[Entity]:
    """Build entity records, merging repeated mentions within a category.

    Each distinct text gets frequency 1; a text listed n times in the same
    category is stored once with frequency n rather than as n separate
    records. First-mention order is kept.
    """
    entities: list[Entity] = []
    for category in ENTITY_CATEGORIES:
        counts: dict[str, int] = {}
        for text in getattr(payload, category):
            counts[text] = counts.get(text, 0) + 1
        entity_type = entity_type_for(category)
        entities.extend(
            Entity(id=uuid4(), paper_id=paper_id, type=entity_type, text=text, frequency=count)
            for text, count in counts.items()
        )
    return entities


class StructuredExtractor:
    """Runs PICO and entity extraction with at-most-once generation per paper."""

    def __init__(self, store: InMemoryStore, generator: GenerationClient, settings: Settings) -> None:
        self._store = store
        self._generator = generator
        self._settings = settings
        self._locks: dict[tuple[str, UUID], asyncio.Lock] = {}

    def _lock_for(self, kind: str, paper_id: UUID) -> asyncio.Lock:
        return self._locks.setdefault((kind, paper_id), asyncio.Lock())

    def forget(self, paper_id: UUID) -> None:
        """Drop the locks of a deleted paper."""
        for kind in ("pico", "entities"):
            self._locks.pop((kind, paper_id), None)

    def _require_paper(self, paper_id: UUID) -> Paper:
        paper = self._store.get_paper(paper_id)
        if paper is None:
            raise NotFound(paper_id)
        return paper

    async def _generate(
        self, system_prompt: str, user_prompt: str, response_model: type[BaseModel]
    ) -> dict[str, Any]:
        try:
            return await self._generator.generate_json(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                response_model=response_model,
            )
        except MalformedGenerationOutput as e:
            logger.warning(f"Unparsable {response_model.__name__} output, using defaults: {e}")
            return {}

    async def extract_pico(self, paper_id: UUID) -> PicoElement:
        """Extract (or return the existing) PICO record of a paper.

        Raises:
            NotFound: If the paper does not exist
            GenerationUnavailable: If generation fails (nothing is stored)
        """
        self._require_paper(paper_id)

        async with self._lock_for("pico", paper_id):
            existing = self._store.get_pico(paper_id)
            if existing is not None:
                logger.debug(f"Returning existing PICO record for paper {paper_id}")
                return existing

            paper = self._require_paper(paper_id)
            text = paper.abstract + "\n\n" + paper.full_text[: self._settings.pico_full_text_chars]
            raw = await self._generate(PICO_SYSTEM_PROMPT, build_pico_prompt(text), PicoPayload)
            payload = decode_model_output(PicoPayload, raw)

            pico = self._store.add_pico_if_absent(
                PicoElement(
                    id=uuid4(),
                    paper_id=paper_id,
                    population=payload.population,
                    intervention=payload.intervention,
                    comparison=payload.comparison,
                    outcome=payload.outcome,
                    population_confidence=payload.population_confidence,
                    intervention_confidence=payload.intervention_confidence,
                    comparison_confidence=payload.comparison_confidence,
                    outcome_confidence=payload.outcome_confidence,
                    extracted_at=datetime.now(timezone.utc),
                )
            )

        logger.info(f"Extracted PICO elements for paper {paper_id}")
        return pico

    async def extract_entities(self, paper_id: UUID) -> list[Entity]:
        """Extract (or return the existing) entities of a paper.

        An extraction that finds nothing is stored as an empty result and is
        not re-run.

        Raises:
            NotFound: If the paper does not exist
            GenerationUnavailable: If generation fails (nothing is stored)
        """
        self._require_paper(paper_id)

        async with self._lock_for("entities", paper_id):
            existing = self._store.get_entities(paper_id)
            if existing is not None:
                logger.debug(f"Returning {len(existing)} existing entities for paper {paper_id}")
                return existing

            paper = self._require_paper(paper_id)
            text = (paper.abstract + "\n\n" + paper.full_text)[: self._settings.entity_text_chars]
            raw = await self._generate(ENTITY_SYSTEM_PROMPT, build_entity_prompt(text), EntityPayload)
            payload = decode_model_output(EntityPayload, raw)

            entities = self._store.add_entities_if_absent(
                paper_id, entities_from_payload(paper_id, payload)
            )

        logger.info(f"Extracted {len(entities)} entities for paper {paper_id}")
        return entities
