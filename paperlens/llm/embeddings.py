"""Embedding gateway: text -> fixed-length vector.

Security: the API key comes from settings (environment) only.
A deterministic hashing client is used when no key is configured.
"""

import hashlib
import logging
import math
import re
import time
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from paperlens.config import Settings
from paperlens.errors import EmbeddingUnavailable
from paperlens.utils.logging import StructuredGatewayLogger
from paperlens.utils.metrics import PrometheusGatewayMetrics

logger = logging.getLogger(__name__)

CAPABILITY = "embedding"

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class EmbeddingGateway(Protocol):
    """Protocol for embedding implementations."""

    dimensions: int

    async def embed(self, text: str) -> list[float]:
        """Embed text into a vector of ``dimensions`` floats.

        Input longer than the gateway's maximum is silently truncated.

        Raises:
            EmbeddingUnavailable: If the capability fails or returns a malformed vector
        """
        ...


class HashingEmbeddingClient:
    """Deterministic offline embedder (no API key required).

    Lower-cased alphanumeric tokens are hashed into ``dimensions`` buckets and
    the resulting count vector is L2-normalised. Texts sharing vocabulary get
    high cosine similarity; the vectors carry no semantics beyond that.
    """

    def __init__(self, dimensions: int = 1536, max_chars: int = 8000) -> None:
        self.dimensions = dimensions
        self.max_chars = max_chars

    async def embed(self, text: str) -> list[float]:
        """Embed text by token hashing."""
        vector = [0.0] * self.dimensions
        for token in _TOKEN_PATTERN.findall(text[: self.max_chars].lower()):
            digest = hashlib.md5(token.encode("utf-8"), usedforsecurity=False).digest()
            vector[int.from_bytes(digest[:4], "big") % self.dimensions] += 1.0

        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return vector
        return [value / norm for value in vector]


class OpenAIEmbeddingClient:
    """OpenAI-backed embedding client."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        max_chars: int = 8000,
        timeout_seconds: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        """Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Embedding model name
            dimensions: Expected vector length; responses of any other length are rejected
            max_chars: Input truncation limit in characters
            timeout_seconds: Per-request timeout enforced by the SDK
            max_retries: Retries performed by the SDK on transient failures
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=max_retries)
        self.model = model
        self.dimensions = dimensions
        self.max_chars = max_chars
        self._log = StructuredGatewayLogger()
        self._metrics = PrometheusGatewayMetrics()

    async def embed(self, text: str) -> list[float]:
        """Embed text using the OpenAI embeddings API."""
        truncated = text[: self.max_chars]
        started = time.perf_counter()

        try:
            response = await self.client.embeddings.create(model=self.model, input=truncated)
        except OpenAIError as e:
            self._fail("api_error", started, len(truncated))
            raise EmbeddingUnavailable(f"Embedding request failed: {e}") from e

        try:
            vector = self._validate_vector(response)
        except EmbeddingUnavailable:
            self._fail("malformed_response", started, len(truncated))
            raise

        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_latency(CAPABILITY, "success", latency_ms)
        self._log.log_call(CAPABILITY, self.model, "success", latency_ms, len(truncated))
        return vector

    def _validate_vector(self, response: object) -> list[float]:
        """Extract the single embedding from a response, rejecting malformed shapes."""
        data = getattr(response, "data", None)
        if not data or len(data) != 1:
            raise EmbeddingUnavailable("Embedding response did not contain exactly one vector")

        embedding = getattr(data[0], "embedding", None)
        if not isinstance(embedding, list) or not all(
            isinstance(value, (int, float)) and not isinstance(value, bool) for value in embedding
        ):
            raise EmbeddingUnavailable("Embedding response vector is not a list of numbers")

        if len(embedding) != self.dimensions:
            raise EmbeddingUnavailable(
                f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}"
            )

        return [float(value) for value in embedding]

    def _fail(self, reason: str, started: float, input_chars: int) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_latency(CAPABILITY, "error", latency_ms)
        self._metrics.inc_error(CAPABILITY, reason)
        self._log.log_call(CAPABILITY, self.model, "error", latency_ms, input_chars, reason)


def get_embedding_client(settings: Settings) -> EmbeddingGateway:
    """Factory function to get the embedding client for the configured environment.

    Returns:
        OpenAIEmbeddingClient if an API key is configured, HashingEmbeddingClient otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI embeddings ({settings.openai_embedding_model})")
        return OpenAIEmbeddingClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_embedding_model,
            dimensions=settings.embedding_dimensions,
            max_chars=settings.embedding_max_chars,
            timeout_seconds=settings.openai_timeout_seconds,
            max_retries=settings.openai_max_retries,
        )

    logger.warning("No OpenAI API key configured, using deterministic hashing embeddings")
    return HashingEmbeddingClient(
        dimensions=settings.embedding_dimensions,
        max_chars=settings.embedding_max_chars,
    )
