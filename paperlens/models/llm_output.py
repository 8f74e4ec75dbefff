"""Schema-validated decoding of generation output.

The generation capability returns loosely shaped JSON. Each payload model maps
absent or malformed fields to a fixed default instead of failing:

- text fields: missing, non-string or blank -> None
- confidence fields: missing, non-numeric or NaN -> 0.0, otherwise clamped to [0, 1]
- string lists: non-list -> [], non-string and blank members dropped
- cited indices: non-list -> [], members kept only when they denote an integer
"""

import math
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _coerce_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(1.0, max(0.0, number))


def _coerce_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coerce_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class AnswerPayload(BaseModel):
    """Decoded answer-generation response: ``{answer, citedIndices}``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    answer: str | None = None
    cited_indices: list[int] = Field(default_factory=list, alias="citedIndices")

    @field_validator("answer", mode="before")
    @classmethod
    def normalize_answer(cls, v: Any) -> str | None:
        """Blank or non-string answers count as missing."""
        return _coerce_text(v)

    @field_validator("cited_indices", mode="before")
    @classmethod
    def normalize_indices(cls, v: Any) -> list[int]:
        """Keep only entries that denote an integer, preserving order and duplicates."""
        if not isinstance(v, list):
            return []
        indices = (_coerce_index(item) for item in v)
        return [index for index in indices if index is not None]


class PicoPayload(BaseModel):
    """Decoded PICO extraction response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    population: str | None = None
    intervention: str | None = None
    comparison: str | None = None
    outcome: str | None = None
    population_confidence: float = Field(0.0, alias="populationConfidence")
    intervention_confidence: float = Field(0.0, alias="interventionConfidence")
    comparison_confidence: float = Field(0.0, alias="comparisonConfidence")
    outcome_confidence: float = Field(0.0, alias="outcomeConfidence")

    @field_validator("population", "intervention", "comparison", "outcome", mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str | None:
        """Blank or non-string elements count as missing."""
        return _coerce_text(v)

    @field_validator(
        "population_confidence",
        "intervention_confidence",
        "comparison_confidence",
        "outcome_confidence",
        mode="before",
    )
    @classmethod
    def normalize_confidence(cls, v: Any) -> float:
        """Clamp confidences to [0, 1]; unusable values become 0."""
        return _coerce_confidence(v)


class EntityPayload(BaseModel):
    """Decoded entity extraction response, keyed by plural category name."""

    model_config = ConfigDict(extra="ignore")

    diseases: list[str] = Field(default_factory=list)
    drugs: list[str] = Field(default_factory=list)
    proteins: list[str] = Field(default_factory=list)
    genes: list[str] = Field(default_factory=list)

    @field_validator("diseases", "drugs", "proteins", "genes", mode="before")
    @classmethod
    def normalize_entities(cls, v: Any) -> list[str]:
        """Drop non-string and blank entries."""
        return _coerce_string_list(v)


def decode_model_output(model: type[PayloadT], raw: Any) -> PayloadT:
    """Decode a raw generation response into ``model`` with field defaults.

    Args:
        model: Payload model class
        raw: Parsed JSON from the generation capability (non-dicts decode as {})

    Returns:
        Validated payload instance
    """
    if not isinstance(raw, dict):
        raw = {}
    return model.model_validate(raw)
