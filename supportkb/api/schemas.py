"""Pydantic request/response schemas for the supportKB API.

Defines the public contract for the content-management, search, rating
and health endpoints.

Request fields default to empty values instead of being required: a
missing field reaches the service layer, which reports it as a 400
``ValidationError`` with a specific message rather than a generic 422.
Logical content items are returned with camelCase keys (``createdAt``,
``chunkCount``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from supportkb.models.content import ContentItem


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    error_type: str | None = None


# ---------------------------------------------------------------------------
# Content management
# ---------------------------------------------------------------------------


class ContentListResponse(BaseModel):
    """Every logical item in the knowledge base, newest first."""

    items: list[ContentItem] = Field(default_factory=list)


class AddUrlRequest(BaseModel):
    url: str = ""
    description: str = ""


class DocumentUploadResponse(BaseModel):
    """Result of a document upload; ``chunks`` is the stored chunk count."""

    id: str
    filename: str
    description: str
    chunks: int


class DeleteContentRequest(BaseModel):
    id: str = ""


class DeleteContentResponse(BaseModel):
    success: bool = True


# ---------------------------------------------------------------------------
# Knowledge search
# ---------------------------------------------------------------------------


class KnowledgeSearchRequest(BaseModel):
    topic: str = ""


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


class SubmitRatingRequest(BaseModel):
    """A 1-5 chat satisfaction rating.

    ``rating`` is left untyped so out-of-range or non-integer values are
    rejected by the feedback provider with ``"Invalid rating value"``.
    """

    rating: Any = None
    session_id: str | None = Field(default=None, max_length=200)


class RatingResponse(BaseModel):
    success: bool = True
    id: int


class RatingSummaryResponse(BaseModel):
    """Aggregate rating statistics; ``by_value`` maps "1".."5" to counts."""

    total_ratings: int = 0
    average: float | None = None
    by_value: dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]
