"""Unit tests for embedding gateway implementations."""

import hashlib
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from openai import APIConnectionError

from paperlens.config import Settings
from paperlens.errors import EmbeddingUnavailable
from paperlens.llm.embeddings import (
    HashingEmbeddingClient,
    OpenAIEmbeddingClient,
    get_embedding_client,
)
from paperlens.retrieval.similarity import cosine_similarity


def embedding_response(*vectors: list[float]) -> SimpleNamespace:
    """Build an object shaped like an OpenAI embeddings response."""
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector) for vector in vectors])


@pytest.fixture
def openai_embedder() -> OpenAIEmbeddingClient:
    """OpenAI embedding client with a mocked transport."""
    client = OpenAIEmbeddingClient(api_key="test-key", dimensions=3, max_chars=10)
    client.client.embeddings.create = AsyncMock(return_value=embedding_response([0.1, 0.2, 0.3]))
    return client


class TestHashingEmbeddingClient:
    """Test deterministic offline embeddings."""

    @pytest.mark.asyncio
    async def test_vector_has_configured_dimensions(self) -> None:
        client = HashingEmbeddingClient(dimensions=64)

        vector = await client.embed("Metformin lowers HbA1c.")

        assert len(vector) == 64
        assert sum(v * v for v in vector) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_same_text_same_vector(self) -> None:
        client = HashingEmbeddingClient(dimensions=64)

        assert await client.embed("insulin resistance") == await client.embed("insulin resistance")

    @pytest.mark.asyncio
    async def test_shared_vocabulary_scores_higher(self) -> None:
        client = HashingEmbeddingClient()

        query = await client.embed("metformin glycemic control")
        related = await client.embed("Metformin improved glycemic control in adults.")
        unrelated = await client.embed("Telescopes observe distant galaxies.")

        assert cosine_similarity(query, related) > cosine_similarity(query, unrelated)

    @pytest.mark.asyncio
    async def test_empty_text_gives_zero_vector(self) -> None:
        client = HashingEmbeddingClient(dimensions=8)

        assert await client.embed("") == [0.0] * 8

    @pytest.mark.asyncio
    async def test_hash_is_not_used_for_security(self) -> None:
        """Test that token hashing works on FIPS-restricted builds."""
        client = HashingEmbeddingClient(dimensions=8)

        with patch("paperlens.llm.embeddings.hashlib.md5", wraps=hashlib.md5) as md5:
            await client.embed("metformin trial")

        assert md5.call_count == 2
        assert all(call.kwargs == {"usedforsecurity": False} for call in md5.call_args_list)


class TestOpenAIEmbeddingClient:
    """Test OpenAI embedding client with a mocked API."""

    @pytest.mark.asyncio
    async def test_returns_vector(self, openai_embedder: OpenAIEmbeddingClient) -> None:
        vector = await openai_embedder.embed("short")

        assert vector == [0.1, 0.2, 0.3]
        openai_embedder.client.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input="short"
        )

    @pytest.mark.asyncio
    async def test_input_is_truncated(self, openai_embedder: OpenAIEmbeddingClient) -> None:
        """Test that input beyond max_chars is cut, not rejected."""
        await openai_embedder.embed("abcdefghijklmnop")

        kwargs = openai_embedder.client.embeddings.create.await_args.kwargs
        assert kwargs["input"] == "abcdefghij"

    @pytest.mark.asyncio
    async def test_api_error_raises_embedding_unavailable(
        self, openai_embedder: OpenAIEmbeddingClient
    ) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        openai_embedder.client.embeddings.create = AsyncMock(
            side_effect=APIConnectionError(request=request)
        )

        with pytest.raises(EmbeddingUnavailable):
            await openai_embedder.embed("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            embedding_response(),
            embedding_response([0.1, 0.2, 0.3], [0.1, 0.2, 0.3]),
            embedding_response([0.1, 0.2]),
            embedding_response([0.1, "x", 0.3]),
            embedding_response([True, 0.2, 0.3]),
            SimpleNamespace(data=[SimpleNamespace(embedding=None)]),
        ],
        ids=["no-data", "two-vectors", "wrong-length", "non-numeric", "boolean", "missing"],
    )
    async def test_malformed_response_raises(
        self, openai_embedder: OpenAIEmbeddingClient, response: SimpleNamespace
    ) -> None:
        openai_embedder.client.embeddings.create = AsyncMock(return_value=response)

        with pytest.raises(EmbeddingUnavailable):
            await openai_embedder.embed("text")


class TestGetEmbeddingClient:
    """Test embedding client factory."""

    def test_no_key_selects_hashing_client(self) -> None:
        settings = Settings(_env_file=None, openai_api_key=None, embedding_dimensions=32)

        client = get_embedding_client(settings)

        assert isinstance(client, HashingEmbeddingClient)
        assert client.dimensions == 32

    def test_empty_key_selects_hashing_client(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="")

        assert isinstance(get_embedding_client(settings), HashingEmbeddingClient)

    def test_key_selects_openai_client(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="sk-test", embedding_max_chars=100)

        client = get_embedding_client(settings)

        assert isinstance(client, OpenAIEmbeddingClient)
        assert client.model == "text-embedding-3-small"
        assert client.max_chars == 100
