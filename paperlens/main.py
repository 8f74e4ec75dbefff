"""FastAPI application factory.

The store and both gateways are constructed once per app and kept on
``app.state``; routes reach them through dependencies.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from paperlens.api.routes.extraction import router as extraction_router
from paperlens.api.routes.health import router as health_router
from paperlens.api.routes.metrics import router as metrics_router
from paperlens.api.routes.papers import router as papers_router
from paperlens.api.routes.qa import router as qa_router
from paperlens.api.routes.search import router as search_router
from paperlens.config import Settings, get_settings
from paperlens.db.inmemory import InMemoryStore
from paperlens.errors import (
    AnswerFailed,
    EmbeddingUnavailable,
    GenerationUnavailable,
    NotFound,
    ValidationFailure,
)
from paperlens.extraction.extractor import StructuredExtractor
from paperlens.llm.client import GenerationClient, get_llm_client
from paperlens.llm.embeddings import EmbeddingGateway, get_embedding_client
from paperlens.utils.logging import setup_logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map pipeline errors to operation-failed responses."""

    @app.exception_handler(ValidationFailure)
    async def handle_validation_failure(request: Request, exc: ValidationFailure) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFound)
    async def handle_not_found(request: Request, exc: NotFound) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Paper not found")

    @app.exception_handler(EmbeddingUnavailable)
    async def handle_embedding_unavailable(
        request: Request, exc: EmbeddingUnavailable
    ) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Embedding service unavailable")

    @app.exception_handler(GenerationUnavailable)
    async def handle_generation_unavailable(
        request: Request, exc: GenerationUnavailable
    ) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Generation service unavailable")

    @app.exception_handler(AnswerFailed)
    async def handle_answer_failed(request: Request, exc: AnswerFailed) -> JSONResponse:
        logger.error(f"Question failed at stage {exc.stage}: {exc}")
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Failed to answer question")


def create_app(
    settings: Settings | None = None,
    *,
    store: InMemoryStore | None = None,
    embedder: EmbeddingGateway | None = None,
    generator: GenerationClient | None = None,
) -> FastAPI:
    """Create the API application.

    Args:
        settings: Settings (default: cached environment settings)
        store: Store to serve (default: a fresh InMemoryStore)
        embedder: Embedding gateway (default: chosen from settings)
        generator: Generation gateway (default: chosen from settings)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="PaperLens API", version="0.1.0")

    app.state.settings = settings
    app.state.store = store if store is not None else InMemoryStore()
    app.state.embedder = embedder if embedder is not None else get_embedding_client(settings)
    app.state.generator = generator if generator is not None else get_llm_client(settings)
    app.state.extractor = StructuredExtractor(app.state.store, app.state.generator, settings)

    register_exception_handlers(app)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(papers_router, prefix=API_PREFIX)
    app.include_router(extraction_router, prefix=API_PREFIX)
    app.include_router(search_router, prefix=API_PREFIX)
    app.include_router(qa_router, prefix=API_PREFIX)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "PaperLens API", "version": "0.1.0"}

    return app


app = create_app()
