"""Custom exception hierarchy for supportKB.

All application exceptions inherit from :class:`SupportKBError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai_embedding", "chromadb", "web_scraper")
caused the failure, and a ``status_code`` class attribute that the API
middleware uses when rendering the error.

    SupportKBError  (base -- 500)
    +-- ValidationError          (400: missing/malformed required field)
    +-- UnsupportedTypeError     (400: file type not accepted)
    +-- FileTooLargeError        (400: upload over the size cap)
    +-- ConfigurationError       (missing credential / invalid setting)
    +-- ScrapeError              (page fetch failed)
    +-- EmbeddingError           (embedding API failure)
    +-- VectorStoreError         (vector database failure)
    +-- IngestionError           (one or more records failed to store)
    +-- FetchError               (content listing failed)
    +-- DeleteError              (content deletion failed)

Client errors are raised before any network call is made.  Dependency
errors are never retried internally; the caller decides whether to retry.
"""


class SupportKBError(Exception):
    """Base exception for all supportKB errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[chromadb] upsert failed``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client errors (user-correctable)
# ---------------------------------------------------------------------------


class ValidationError(SupportKBError):
    """Raised when a required field is missing or malformed."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedTypeError(SupportKBError):
    """Raised when an uploaded file's MIME type is not accepted."""

    status_code = 400

    def __init__(
        self,
        message: str = "Unsupported file type",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FileTooLargeError(SupportKBError):
    """Raised when an uploaded file exceeds the size cap."""

    status_code = 400

    def __init__(
        self,
        message: str = "File too large (max 10MB)",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(SupportKBError):
    """Raised when a collaborator is used without its required configuration."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External dependency errors
# ---------------------------------------------------------------------------


class ScrapeError(SupportKBError):
    """Raised when a web page cannot be fetched (network error or non-2xx)."""

    def __init__(
        self,
        message: str = "Failed to scrape URL",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(SupportKBError):
    """Raised when the embedding API call fails."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(SupportKBError):
    """Raised by vector-store providers when a store operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Service-boundary errors
# ---------------------------------------------------------------------------


class IngestionError(SupportKBError):
    """Raised when storing ingested records fails.

    Records stored before the failure are not rolled back.
    """

    def __init__(
        self,
        message: str = "Failed to process document",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FetchError(SupportKBError):
    """Raised when listing stored content fails."""

    def __init__(
        self,
        message: str = "Failed to fetch items",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DeleteError(SupportKBError):
    """Raised when deleting stored content fails."""

    def __init__(
        self,
        message: str = "Failed to delete item",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
