"""Turns uploaded files and web pages into plain text.

Both entry points produce the same thing, a plain-text payload, so the
ingestion service treats URL and document sources uniformly after this
step.  File-intake checks (type, size) run here, before any network call.
"""

from __future__ import annotations

import structlog

from supportkb.interfaces.article_provider import IArticleProvider
from supportkb.utils.errors import FileTooLargeError, UnsupportedTypeError

logger = structlog.get_logger(logger_name=__name__)

SUPPORTED_MIME_TYPES = frozenset({"text/plain"})
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _base_mime_type(declared: str | None) -> str:
    """Return ``"text/plain"`` for ``"Text/Plain; charset=utf-8"``."""
    return (declared or "").split(";", 1)[0].strip().lower()


class ContentNormalizer:
    """Extracts plain text from uploaded documents and URLs.

    Parameters
    ----------
    article_provider:
        Fetches and extracts page text for :meth:`from_url`.
    max_upload_bytes:
        Size cap for :meth:`from_document` (default 10 MiB).
    """

    def __init__(
        self,
        article_provider: IArticleProvider,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._article_provider = article_provider
        self._max_upload_bytes = max_upload_bytes

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    def check_document(self, size: int, declared_mime_type: str | None) -> None:
        """Raise if a file of *size* bytes and this MIME type is not accepted.

        Raises
        ------
        UnsupportedTypeError
            If the MIME type (parameters ignored) is not ``text/plain``.
        FileTooLargeError
            If *size* exceeds the upload cap.
        """
        mime_type = _base_mime_type(declared_mime_type)
        if mime_type not in SUPPORTED_MIME_TYPES:
            logger.info("document_rejected_type", mime_type=declared_mime_type)
            raise UnsupportedTypeError()
        if size > self._max_upload_bytes:
            logger.info("document_rejected_size", size=size, limit=self._max_upload_bytes)
            raise FileTooLargeError(
                message=f"File too large (max {self._max_upload_bytes // (1024 * 1024)}MB)"
            )

    def from_document(self, file_bytes: bytes, declared_mime_type: str | None) -> str:
        """Validate an uploaded file and decode it as UTF-8.

        Invalid byte sequences become U+FFFD rather than failing the upload.
        """
        self.check_document(len(file_bytes), declared_mime_type)
        return file_bytes.decode("utf-8", errors="replace")

    async def from_url(self, url: str) -> str:
        """Fetch *url* and return its main-content text.

        Returns an empty string when the page has no extractable text.

        Raises
        ------
        supportkb.utils.errors.ScrapeError
            On network failure or a non-2xx response.
        """
        article = await self._article_provider.extract_content(url)
        return article.text
