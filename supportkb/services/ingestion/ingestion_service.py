"""Orchestrator for knowledge-base ingestion.

Pipeline stages: **normalize -> chunk -> embed -> store**.

:class:`IngestionService` coordinates four collaborators (content
normalizer, chunker, embedding provider, vector store) without any of them
knowing about each other.  URLs are stored as a single record; documents
are split into overlapping chunks, one record per chunk, all sharing the
``"<base_id>_chunk"`` ID prefix.

All dependencies are injected via the constructor, so providers can be
swapped without changing this class.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, NoReturn

import structlog

from supportkb.models.content import (
    DOCUMENT_ID_PREFIX,
    DOCUMENT_TYPE,
    URL_ID_PREFIX,
    DocumentItem,
    UrlItem,
    VectorRecord,
    chunk_id,
)
from supportkb.utils.concurrency import throttled_gather
from supportkb.utils.errors import (
    ConfigurationError,
    EmbeddingError,
    IngestionError,
    ScrapeError,
    ValidationError,
    VectorStoreError,
)

if TYPE_CHECKING:
    from supportkb.interfaces.embedding_provider import IEmbeddingProvider
    from supportkb.interfaces.vector_store_provider import IVectorStoreProvider
    from supportkb.services.ingestion.chunker import TextChunker
    from supportkb.services.ingestion.content_normalizer import ContentNormalizer

logger = structlog.get_logger(logger_name=__name__)


def new_url_id() -> str:
    return f"{URL_ID_PREFIX}{uuid.uuid4().hex}"


def new_document_id() -> str:
    """Return a fresh document base ID; never contains ``"_chunk"``."""
    return f"{DOCUMENT_ID_PREFIX}{uuid.uuid4().hex}"


class IngestionService:
    """Orchestrates ingestion: normalize -> chunk -> embed -> store.

    Parameters
    ----------
    normalizer:
        Validates uploads and extracts text from files and URLs.
    chunker:
        Splits document text into overlapping windows.
    embedding_provider:
        Generates embedding vectors for record text.
    vector_store:
        Persists the embedded records.
    max_concurrency:
        Upper bound on chunk embed+store tasks in flight for one document.
    """

    def __init__(
        self,
        normalizer: ContentNormalizer,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        max_concurrency: int = 8,
    ) -> None:
        self._normalizer = normalizer
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._max_concurrency = max(1, max_concurrency)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_url(self, url: str, description: str) -> UrlItem:
        """Scrape *url*, embed its text as one vector and store it.

        Raises
        ------
        ValidationError
            If *url* or *description* is blank.  Raised before any
            network call.
        ScrapeError
            If the page cannot be fetched or has no extractable text.
        EmbeddingError
            If the embedding call fails.
        IngestionError
            If the record cannot be stored.
        """
        url = (url or "").strip()
        description = (description or "").strip()
        if not url or not description:
            raise ValidationError(message="URL and description are required")

        text = await self._normalizer.from_url(url)
        if not text.strip():
            raise ScrapeError(message=f"No extractable text found at {url}")

        vector = await self._embedding_provider.embed_single(text)

        created_at = datetime.now(timezone.utc)
        record = VectorRecord(
            id=new_url_id(),
            values=vector,
            metadata={
                "url": url,
                "description": description,
                "content": text,
                "timestamp": created_at.isoformat(),
                "isUrl": True,
            },
        )
        try:
            await self._vector_store.upsert([record])
        except VectorStoreError as exc:
            logger.error("url_ingest_failed", url=url, error=str(exc))
            raise IngestionError(
                message="Failed to add URL",
                provider_name=exc.provider_name,
            ) from exc

        logger.info("url_ingested", id=record.id, url=url, text_length=len(text))
        return UrlItem(id=record.id, url=url, description=description, created_at=created_at)

    async def ingest_document(
        self,
        file_bytes: bytes,
        mime_type: str | None,
        filename: str,
        description: str,
    ) -> DocumentItem:
        """Validate, chunk, embed and store an uploaded document.

        Every chunk is embedded and stored as its own concurrent task.  A
        failing chunk does not cancel its siblings, but the call fails if
        any chunk failed; chunks already stored are not removed.

        Raises
        ------
        UnsupportedTypeError, FileTooLargeError
            From file-intake validation.
        ValidationError
            If *description* or *filename* is blank, or the document has
            no text.
        EmbeddingError
            If embedding any chunk fails.
        IngestionError
            If storing any chunk fails.
        """
        text = self._normalizer.from_document(file_bytes, mime_type)

        description = (description or "").strip()
        filename = (filename or "").strip()
        if not description:
            raise ValidationError(message="Description is required")
        if not filename:
            raise ValidationError(message="Filename is required")

        chunks = list(self._chunker.split(text))
        if not chunks:
            raise ValidationError(message="Document contains no text")

        base_id = new_document_id()
        created_at = datetime.now(timezone.utc)
        timestamp = created_at.isoformat()
        t0 = time.perf_counter()

        semaphore = asyncio.Semaphore(self._max_concurrency)
        results = await throttled_gather(
            [
                self._store_chunk(base_id, index, chunk, filename, description, timestamp)
                for index, chunk in enumerate(chunks)
            ],
            semaphore,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "document_ingest_failed",
                id=base_id,
                filename=filename,
                failed_chunks=len(failures),
                total_chunks=len(chunks),
                error=str(failures[0]),
            )
            self._raise_chunk_failure(failures)

        logger.info(
            "document_ingested",
            id=base_id,
            filename=filename,
            chunks=len(chunks),
            chars=len(text),
            elapsed_s=round(time.perf_counter() - t0, 2),
        )
        return DocumentItem(
            id=base_id,
            filename=filename,
            description=description,
            created_at=created_at,
            chunk_count=len(chunks),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _store_chunk(
        self,
        base_id: str,
        index: int,
        text: str,
        filename: str,
        description: str,
        timestamp: str,
    ) -> str:
        vector = await self._embedding_provider.embed_single(text)
        record = VectorRecord(
            id=chunk_id(base_id, index),
            values=vector,
            metadata={
                "filename": filename,
                "description": description,
                "content": text,
                "timestamp": timestamp,
                "type": DOCUMENT_TYPE,
                "parent_id": base_id,
                "chunk_index": index,
            },
        )
        await self._vector_store.upsert([record])
        return record.id

    @staticmethod
    def _raise_chunk_failure(failures: list[BaseException]) -> NoReturn:
        """Re-raise the most meaningful of the collected chunk failures.

        Embedding and configuration errors pass through unchanged; any
        other failure is reported as :class:`IngestionError`.
        """
        for failure in failures:
            if not isinstance(failure, Exception):
                raise failure
        for failure in failures:
            if isinstance(failure, (EmbeddingError, ConfigurationError)):
                raise failure
        first = failures[0]
        raise IngestionError(
            message="Failed to process document",
            provider_name=getattr(first, "provider_name", None),
        ) from first
