"""supportKB FastAPI application entry point.

Wires together all providers, services, and routes via dependency
injection.  Loads configuration from environment variables and ``.env``
and configures structured logging at import time.

Provider construction never fails on missing credentials: the embedding
provider raises ``ConfigurationError`` on first use instead, so listing
and deleting content keep working without an OpenAI key.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from supportkb.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    request_validation_handler,
)
from supportkb.api.routes import APP_VERSION
from supportkb.api.routes import router as api_router
from supportkb.config.settings import Settings
from supportkb.providers.article.web_scraper_provider import WebScraperProvider
from supportkb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from supportkb.providers.feedback.sqlite_feedback_provider import SQLiteFeedbackProvider
from supportkb.providers.vector_store.chromadb_provider import ChromaDBProvider
from supportkb.services.content_deletion_service import ContentDeletionService
from supportkb.services.content_listing_service import ContentListingService
from supportkb.services.ingestion.chunker import TextChunker
from supportkb.services.ingestion.content_normalizer import ContentNormalizer
from supportkb.services.ingestion.ingestion_service import IngestionService
from supportkb.services.knowledge_search_service import KnowledgeSearchService
from supportkb.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.scrape_timeout),
        follow_redirects=True,
    )

    # -- Providers --
    article_provider = WebScraperProvider(
        http_client=http_client,
        proxy_url=app_settings.scrape_proxy_url,
    )
    embedding_provider = OpenAIEmbeddingProvider(settings=app_settings)
    vector_store = ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
        expected_dimension=embedding_provider.get_dimension(),
    )
    feedback_provider = SQLiteFeedbackProvider(db_path=app_settings.feedback_db_path)

    # -- Services --
    normalizer = ContentNormalizer(
        article_provider=article_provider,
        max_upload_bytes=app_settings.max_upload_bytes,
    )
    chunker = TextChunker(
        chunk_size=app_settings.chunk_size,
        overlap=app_settings.chunk_overlap,
    )
    ingestion_service = IngestionService(
        normalizer=normalizer,
        chunker=chunker,
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        max_concurrency=app_settings.ingest_max_concurrency,
    )
    listing_service = ContentListingService(
        vector_store=vector_store,
        page_size=app_settings.list_page_size,
    )
    deletion_service = ContentDeletionService(
        vector_store=vector_store,
        page_size=app_settings.list_page_size,
    )
    search_service = KnowledgeSearchService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        top_k=app_settings.search_top_k,
        min_score=app_settings.search_min_score,
    )

    return {
        "settings": app_settings,
        "http_client": http_client,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "feedback_provider": feedback_provider,
        "normalizer": normalizer,
        "ingestion_service": ingestion_service,
        "listing_service": listing_service,
        "deletion_service": deletion_service,
        "search_service": search_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["feedback_provider"].initialize()

    _logger.info(
        "app_startup",
        version=APP_VERSION,
        environment=settings.app_env,
        embedding=components["embedding_provider"].get_provider_name(),
        embedding_configured=components["embedding_provider"].is_available(),
        collection=settings.chromadb_collection,
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="supportKB API",
        version=APP_VERSION,
        description=(
            "Manage the knowledge base behind a customer-support chat assistant: "
            "add web pages and plain-text documents, list and delete them, and "
            "search them semantically."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    uvicorn.run(
        "supportkb.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
