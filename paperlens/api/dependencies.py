"""FastAPI dependencies resolving the per-process components on app.state."""

from fastapi import Request

from paperlens.config import Settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.extraction.extractor import StructuredExtractor
from paperlens.llm.client import GenerationClient
from paperlens.llm.embeddings import EmbeddingGateway


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_store(request: Request) -> InMemoryStore:
    """The shared in-memory store."""
    return request.app.state.store


def get_embedder(request: Request) -> EmbeddingGateway:
    """The embedding gateway."""
    return request.app.state.embedder


def get_generator(request: Request) -> GenerationClient:
    """The generation gateway."""
    return request.app.state.generator


def get_extractor(request: Request) -> StructuredExtractor:
    """The structured extractor."""
    return request.app.state.extractor
