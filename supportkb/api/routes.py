"""FastAPI routes for the supportKB knowledge base.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

Endpoint                       Method  Description
─────────────────────────────────────────────────────────────────────
/api/v1/content                GET     List every URL and document item
/api/v1/content/urls           POST    Scrape, embed and store a URL
/api/v1/content/documents      POST    Upload, chunk, embed and store a .txt
/api/v1/content                DELETE  Delete an item and all its records
/api/v1/content/search         POST    Knowledge search for the chat tool
/api/v1/ratings                POST    Submit a 1-5 chat rating
/api/v1/ratings/summary        GET     Aggregate rating statistics
/api/v1/health                 GET     Health check + provider status

Service errors propagate as ``SupportKBError`` subclasses and are turned
into ``{"error": ...}`` responses by ``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from supportkb.api.schemas import (
    AddUrlRequest,
    ContentListResponse,
    DeleteContentRequest,
    DeleteContentResponse,
    DocumentUploadResponse,
    ErrorResponse,
    HealthResponse,
    KnowledgeSearchRequest,
    RatingResponse,
    RatingSummaryResponse,
    SubmitRatingRequest,
)
from supportkb.interfaces.feedback_provider import IFeedbackProvider
from supportkb.models.content import UrlItem
from supportkb.models.tool_result import ToolResult
from supportkb.services.content_deletion_service import ContentDeletionService
from supportkb.services.content_listing_service import ContentListingService
from supportkb.services.ingestion.content_normalizer import ContentNormalizer
from supportkb.services.ingestion.ingestion_service import IngestionService
from supportkb.services.knowledge_search_service import KnowledgeSearchService
from supportkb.utils.errors import ValidationError
from supportkb.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

APP_VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")

# Uploads are read in 64 KB pieces so an oversized file is rejected after
# buffering just past the cap instead of in full.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependency helpers (populated on app.state by main.py's _build_all)
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_listing_service(request: Request) -> ContentListingService:
    return request.app.state.listing_service


def _get_deletion_service(request: Request) -> ContentDeletionService:
    return request.app.state.deletion_service


def _get_search_service(request: Request) -> KnowledgeSearchService:
    return request.app.state.search_service


def _get_normalizer(request: Request) -> ContentNormalizer:
    return request.app.state.normalizer


def _get_feedback_provider(request: Request) -> IFeedbackProvider:
    return request.app.state.feedback_provider


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
ListingDep = Annotated[ContentListingService, Depends(_get_listing_service)]
DeletionDep = Annotated[ContentDeletionService, Depends(_get_deletion_service)]
SearchDep = Annotated[KnowledgeSearchService, Depends(_get_search_service)]
NormalizerDep = Annotated[ContentNormalizer, Depends(_get_normalizer)]
FeedbackDep = Annotated[IFeedbackProvider, Depends(_get_feedback_provider)]


# ---------------------------------------------------------------------------
# Content management
# ---------------------------------------------------------------------------


@router.get(
    "/content",
    response_model=ContentListResponse,
    responses=_ERROR_RESPONSES,
    summary="List all knowledge-base items",
)
async def list_content(listing: ListingDep) -> ContentListResponse:
    """Return every URL and document item, documents grouped from their chunks."""
    items = await listing.list_items()
    return ContentListResponse(items=items)


@router.post(
    "/content/urls",
    response_model=UrlItem,
    status_code=201,
    responses=_ERROR_RESPONSES,
    summary="Add a web page to the knowledge base",
)
async def add_url(body: AddUrlRequest, ingestion: IngestionDep) -> UrlItem:
    return await ingestion.ingest_url(body.url, body.description)


@router.post(
    "/content/documents",
    response_model=DocumentUploadResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload a plain-text document to the knowledge base",
)
async def upload_document(
    ingestion: IngestionDep,
    normalizer: NormalizerDep,
    file: Annotated[UploadFile | None, File()] = None,
    description: Annotated[str, Form()] = "",
) -> DocumentUploadResponse:
    """Accept a ``text/plain`` upload, chunk it, and store every chunk."""
    if file is None:
        raise ValidationError(message="No file provided")

    # Reject a wrong type before reading any of the body.
    normalizer.check_document(0, file.content_type)
    data = await _read_upload(file, normalizer.max_upload_bytes)

    item = await ingestion.ingest_document(
        data,
        file.content_type,
        file.filename or "",
        description,
    )
    return DocumentUploadResponse(
        id=item.id,
        filename=item.filename,
        description=item.description,
        chunks=item.chunk_count,
    )


@router.delete(
    "/content",
    response_model=DeleteContentResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a knowledge-base item and all of its records",
)
async def delete_content(
    body: DeleteContentRequest,
    deletion: DeletionDep,
) -> DeleteContentResponse:
    await deletion.delete_item(body.id)
    return DeleteContentResponse(success=True)


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read *file* in pieces, stopping once it is known to exceed *max_bytes*.

    The returned payload is at most ``max_bytes + 1`` long, which is enough
    for the size check downstream to reject it.
    """
    pieces: list[bytes] = []
    total = 0
    while True:
        piece = await file.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        pieces.append(piece)
        total += len(piece)
        if total > max_bytes:
            _logger.info("upload_truncated_over_limit", filename=file.filename, limit=max_bytes)
            break
    return b"".join(pieces)[: max_bytes + 1]


# ---------------------------------------------------------------------------
# Knowledge search
# ---------------------------------------------------------------------------


@router.post(
    "/content/search",
    response_model=ToolResult,
    responses=_ERROR_RESPONSES,
    summary="Search the knowledge base for a topic",
)
async def search_content(body: KnowledgeSearchRequest, search: SearchDep) -> ToolResult:
    """Return matching text and sources, or a ``no_match`` result."""
    return await search.search(body.topic)


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


@router.post(
    "/ratings",
    response_model=RatingResponse,
    responses=_ERROR_RESPONSES,
    summary="Submit a 1-5 chat satisfaction rating",
)
async def submit_rating(body: SubmitRatingRequest, feedback: FeedbackDep) -> RatingResponse:
    row = await feedback.submit_rating(rating=body.rating, session_id=body.session_id)
    return RatingResponse(success=True, id=row["id"])


@router.get(
    "/ratings/summary",
    response_model=RatingSummaryResponse,
    summary="Get aggregate rating statistics",
)
async def get_rating_summary(feedback: FeedbackDep) -> RatingSummaryResponse:
    summary = await feedback.get_rating_summary()
    return RatingSummaryResponse(**summary)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report whether the vector store is reachable and embeddings are configured.

    ``healthy`` needs both; ``degraded`` means the store works but new
    content cannot be embedded; ``unhealthy`` means the store is down.
    """
    providers: dict[str, Any] = {}
    vector_store = getattr(request.app.state, "vector_store", None)
    embedding_provider = getattr(request.app.state, "embedding_provider", None)

    providers["vector_store"] = bool(vector_store is not None and vector_store.is_available())
    providers["embedding"] = bool(
        embedding_provider is not None and embedding_provider.is_available()
    )

    if providers["vector_store"] and providers["embedding"]:
        status = "healthy"
    elif providers["vector_store"]:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=APP_VERSION, providers=providers)
