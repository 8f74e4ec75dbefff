"""Shared pytest fixtures and gateway fakes for all test suites."""

import asyncio
from typing import Any

import pytest
from pydantic import BaseModel

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.errors import EmbeddingUnavailable

VOCABULARY = ("metformin", "hba1c", "insulin", "statin", "cholesterol", "aspirin")


class KeywordEmbedder:
    """Deterministic embedder with one axis per vocabulary keyword.

    Text mentioning none of the keywords maps onto a separate background axis,
    so it is orthogonal to every keyword-bearing text.
    """

    def __init__(self, vocabulary: tuple[str, ...] = VOCABULARY, fail_on: str | None = None) -> None:
        self.vocabulary = vocabulary
        self.dimensions = len(vocabulary) + 1
        self.fail_on = fail_on
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        await asyncio.sleep(0)
        if self.fail_on is not None and self.fail_on in text:
            raise EmbeddingUnavailable("embedding backend down")

        lowered = text.lower()
        vector = [1.0 if word in lowered else 0.0 for word in self.vocabulary]
        vector.append(0.0 if any(vector) else 1.0)
        return vector


class ScriptedGenerationClient:
    """Generation fake returning queued responses and recording every call."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def generate_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[BaseModel],
    ) -> dict[str, Any]:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "response_model": response_model,
            }
        )
        # Yield so concurrent callers can interleave
        await asyncio.sleep(0)

        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings() -> Settings:
    """Default settings without .env or API key."""
    return Settings(_env_file=None, openai_api_key=None)


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory store."""
    return InMemoryStore()


@pytest.fixture
def embedder() -> KeywordEmbedder:
    """Keyword-axis embedder."""
    return KeywordEmbedder()


@pytest.fixture
def embedder_factory() -> type[KeywordEmbedder]:
    """Build keyword embedders with custom vocabulary or failure trigger."""
    return KeywordEmbedder


@pytest.fixture
def generator_factory() -> type[ScriptedGenerationClient]:
    """Build scripted generation clients: ``generator_factory(response, ...)``."""
    return ScriptedGenerationClient
