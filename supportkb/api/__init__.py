"""supportKB API layer: routes, schemas, and middleware."""

from supportkb.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    request_validation_handler,
)
from supportkb.api.routes import router
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

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "request_validation_handler",
    "router",
    "AddUrlRequest",
    "ContentListResponse",
    "DeleteContentRequest",
    "DeleteContentResponse",
    "DocumentUploadResponse",
    "ErrorResponse",
    "HealthResponse",
    "KnowledgeSearchRequest",
    "RatingResponse",
    "RatingSummaryResponse",
    "SubmitRatingRequest",
]
