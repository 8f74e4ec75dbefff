"""Generation gateway: prompts -> JSON object, with OpenAI integration.

Security: Reads API key from settings (environment) only, never hardcoded.
Provides a deterministic stub when no key is present for testing.
"""

import json
import logging
import time
from typing import Any, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel

from paperlens.config import Settings
from paperlens.errors import GenerationUnavailable, MalformedGenerationOutput
from paperlens.models.llm_output import AnswerPayload
from paperlens.utils.logging import StructuredGatewayLogger
from paperlens.utils.metrics import PrometheusGatewayMetrics

logger = logging.getLogger(__name__)

CAPABILITY = "generation"


class GenerationClient(Protocol):
    """Protocol for JSON-mode generation implementations."""

    async def generate_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[BaseModel],
    ) -> dict[str, Any]:
        """Run one completion constrained to return a JSON object.

        Args:
            system_prompt: Role instructions for the model
            user_prompt: Task prompt, including the expected JSON shape
            response_model: Payload model the caller will decode the result with

        Returns:
            Parsed JSON object

        Raises:
            GenerationUnavailable: If the capability fails
            MalformedGenerationOutput: If the output is not a JSON object
        """
        ...


class DeterministicStubClient:
    """Deterministic stub client for testing (no API key required).

    Answers cite the first excerpt; extraction requests return empty objects,
    which decode to the documented field defaults.
    """

    async def generate_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[BaseModel],
    ) -> dict[str, Any]:
        """Generate a deterministic stub object."""
        if response_model is AnswerPayload:
            return {
                "answer": (
                    "This is a stub answer generated without LLM synthesis. "
                    "The most relevant excerpt is cited as [1]."
                ),
                "citedIndices": [1],
            }
        return {}


class OpenAIClient:
    """OpenAI-backed client for JSON-mode chat completions."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Chat model name (default: gpt-4o-mini for cost efficiency)
            timeout_seconds: Per-request timeout enforced by the SDK
            max_retries: Retries performed by the SDK on transient failures
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=max_retries)
        self.model = model
        self._log = StructuredGatewayLogger()
        self._metrics = PrometheusGatewayMetrics()

    async def generate_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[BaseModel],
    ) -> dict[str, Any]:
        """Generate a JSON object using the OpenAI API."""
        input_chars = len(system_prompt) + len(user_prompt)
        started = time.perf_counter()

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            self._fail("api_error", started, input_chars)
            raise GenerationUnavailable(f"Generation request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None

        try:
            result = self._parse_object(content)
        except MalformedGenerationOutput:
            self._fail("malformed_output", started, input_chars)
            raise

        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_latency(CAPABILITY, "success", latency_ms)
        self._log.log_call(CAPABILITY, self.model, "success", latency_ms, input_chars)
        logger.debug(f"Decoded {response_model.__name__} candidate with keys {sorted(result)}")
        return result

    @staticmethod
    def _parse_object(content: str | None) -> dict[str, Any]:
        """Parse completion content, requiring a JSON object."""
        if not content or not content.strip():
            raise MalformedGenerationOutput("Generation returned empty content", raw=content)

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedGenerationOutput(f"Generation returned invalid JSON: {e}", raw=content) from e

        if not isinstance(parsed, dict):
            raise MalformedGenerationOutput(
                f"Generation returned JSON {type(parsed).__name__}, expected object", raw=content
            )

        return parsed

    def _fail(self, reason: str, started: float, input_chars: int) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_latency(CAPABILITY, "error", latency_ms)
        self._metrics.inc_error(CAPABILITY, reason)
        self._log.log_call(CAPABILITY, self.model, "error", latency_ms, input_chars, reason)


def get_llm_client(settings: Settings) -> GenerationClient:
    """Factory function to get appropriate generation client based on config.

    Returns:
        OpenAIClient if API key is configured, DeterministicStubClient otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI client for generation ({settings.openai_model})")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            timeout_seconds=settings.openai_timeout_seconds,
            max_retries=settings.openai_max_retries,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
