"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenAI
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"
    openai_timeout_seconds: float = 60.0
    openai_max_retries: int = 2

    # Embeddings
    embedding_dimensions: int = 1536
    embedding_max_chars: int = 8000

    # Chunking
    chunk_max_chars: int = 500

    # Exploratory search
    search_min_score: float = 0.7
    search_top_k: int = 10

    # Question answering
    qa_min_score: float = 0.6
    qa_top_k: int = 5
    qa_context_max_chars: int = 6000
    citation_excerpt_chars: int = 200

    # Structured extraction input budgets (characters)
    pico_full_text_chars: int = 2000
    entity_text_chars: int = 3000

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
