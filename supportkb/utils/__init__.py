"""Utility modules for supportKB.

- **errors** -- Exception hierarchy rooted at SupportKBError; each error
  class knows the HTTP status the API renders it with.
- **concurrency** -- semaphore-bounded ``asyncio.gather`` used for
  per-chunk embedding and upserts.
- **logging** -- structlog setup with console output in development and
  JSON in production.
"""

from supportkb.utils.concurrency import throttled_gather
from supportkb.utils.errors import (
    ConfigurationError,
    DeleteError,
    EmbeddingError,
    FetchError,
    FileTooLargeError,
    IngestionError,
    ScrapeError,
    SupportKBError,
    UnsupportedTypeError,
    ValidationError,
    VectorStoreError,
)
from supportkb.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "DeleteError",
    "EmbeddingError",
    "FetchError",
    "FileTooLargeError",
    "IngestionError",
    "ScrapeError",
    "SupportKBError",
    "UnsupportedTypeError",
    "ValidationError",
    "VectorStoreError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
