"""Unit tests for IngestionService: validation, chunking, embedding and storage."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import SAMPLE_PAGE_TEXT

from supportkb.interfaces.article_provider import ArticleContent
from supportkb.services.ingestion.chunker import TextChunker
from supportkb.services.ingestion.content_normalizer import ContentNormalizer
from supportkb.services.ingestion.ingestion_service import (
    IngestionService,
    new_document_id,
    new_url_id,
)
from supportkb.utils.errors import (
    ConfigurationError,
    EmbeddingError,
    FileTooLargeError,
    IngestionError,
    ScrapeError,
    UnsupportedTypeError,
    ValidationError,
    VectorStoreError,
)

_DOC_TEXT = ("abcd " * 240).encode()  # 1200 characters -> 3 chunks at 500/50


@pytest.fixture
def service(mock_article_provider, embedding_provider, mock_vector_store) -> IngestionService:
    return IngestionService(
        normalizer=ContentNormalizer(mock_article_provider),
        chunker=TextChunker(chunk_size=500, overlap=50),
        embedding_provider=embedding_provider,
        vector_store=mock_vector_store,
    )


def _stored_records(mock_vector_store) -> list:
    return [r for call in mock_vector_store.upsert.await_args_list for r in call.args[0]]


class TestIdentifiers:
    def test_url_ids(self) -> None:
        first, second = new_url_id(), new_url_id()
        assert first.startswith("url_")
        assert first != second

    def test_document_ids_never_contain_chunk_separator(self) -> None:
        for _ in range(50):
            doc_id = new_document_id()
            assert doc_id.startswith("doc_")
            assert "_chunk" not in doc_id


class TestIngestUrl:
    @pytest.mark.asyncio
    async def test_stores_single_record(self, service, mock_vector_store, embedding_provider) -> None:
        item = await service.ingest_url("  https://shop.example/returns ", " Return policy ")

        assert item.id.startswith("url_")
        assert item.url == "https://shop.example/returns"
        assert item.description == "Return policy"
        assert embedding_provider.calls == [SAMPLE_PAGE_TEXT]

        (record,) = _stored_records(mock_vector_store)
        assert record.id == item.id
        assert record.metadata["isUrl"] is True
        assert record.metadata["content"] == SAMPLE_PAGE_TEXT
        assert record.metadata["description"] == "Return policy"
        assert record.metadata["timestamp"] == item.created_at.isoformat()
        assert len(record.values) == embedding_provider.get_dimension()

    @pytest.mark.parametrize(
        ("url", "description"),
        [("", "Returns"), ("https://shop.example", ""), ("   ", "Returns"), ("https://x", "  ")],
    )
    @pytest.mark.asyncio
    async def test_missing_fields_rejected_before_any_call(
        self, service, mock_article_provider, mock_vector_store, embedding_provider, url, description
    ) -> None:
        with pytest.raises(ValidationError, match="URL and description are required"):
            await service.ingest_url(url, description)

        mock_article_provider.extract_content.assert_not_awaited()
        mock_vector_store.upsert.assert_not_awaited()
        assert embedding_provider.calls == []

    @pytest.mark.asyncio
    async def test_page_without_text_is_scrape_error(
        self, service, mock_article_provider, mock_vector_store
    ) -> None:
        mock_article_provider.extract_content.return_value = ArticleContent(
            url="https://shop.example/blank", text="   "
        )

        with pytest.raises(ScrapeError):
            await service.ingest_url("https://shop.example/blank", "Blank page")
        mock_vector_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scrape_failure_propagates(self, service, mock_article_provider) -> None:
        mock_article_provider.extract_content.side_effect = ScrapeError("HTTP 500")
        with pytest.raises(ScrapeError):
            await service.ingest_url("https://shop.example/", "Home")

    @pytest.mark.asyncio
    async def test_store_failure_is_ingestion_error(self, service, mock_vector_store) -> None:
        mock_vector_store.upsert.side_effect = VectorStoreError("down", provider_name="chromadb")

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest_url("https://shop.example/returns", "Returns")
        assert exc_info.value.message == "Failed to add URL"
        assert exc_info.value.provider_name == "chromadb"


class TestIngestDocument:
    @pytest.mark.asyncio
    async def test_stores_one_record_per_chunk(
        self, service, mock_vector_store, embedding_provider
    ) -> None:
        item = await service.ingest_document(_DOC_TEXT, "text/plain", "faq.txt", "FAQ")

        assert item.id.startswith("doc_")
        assert item.chunk_count == 3
        assert item.filename == "faq.txt"

        records = sorted(_stored_records(mock_vector_store), key=lambda r: r.id)
        assert [r.id for r in records] == [f"{item.id}_chunk{i}" for i in range(3)]
        for index, record in enumerate(records):
            assert record.metadata["type"] == "document"
            assert record.metadata["parent_id"] == item.id
            assert record.metadata["chunk_index"] == index
            assert record.metadata["filename"] == "faq.txt"
            assert record.metadata["timestamp"] == item.created_at.isoformat()
        assert records[0].metadata["content"] == _DOC_TEXT.decode()[:500]
        assert len(embedding_provider.calls) == 3

    @pytest.mark.asyncio
    async def test_short_document_is_single_chunk(self, service, mock_vector_store) -> None:
        item = await service.ingest_document(b"We ship worldwide.", "text/plain", "a.txt", "Shipping")
        assert item.chunk_count == 1
        (record,) = _stored_records(mock_vector_store)
        assert record.id == f"{item.id}_chunk0"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self, service, mock_vector_store) -> None:
        with pytest.raises(UnsupportedTypeError):
            await service.ingest_document(b"%PDF", "application/pdf", "a.pdf", "Manual")
        mock_vector_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_oversized_file_rejected(self, mock_article_provider, embedding_provider, mock_vector_store) -> None:
        service = IngestionService(
            normalizer=ContentNormalizer(mock_article_provider, max_upload_bytes=100),
            chunker=TextChunker(),
            embedding_provider=embedding_provider,
            vector_store=mock_vector_store,
        )
        with pytest.raises(FileTooLargeError):
            await service.ingest_document(b"x" * 101, "text/plain", "a.txt", "Big")
        assert embedding_provider.calls == []

    @pytest.mark.parametrize(
        ("filename", "description", "message"),
        [("faq.txt", "", "Description is required"), ("", "FAQ", "Filename is required")],
    )
    @pytest.mark.asyncio
    async def test_missing_fields(self, service, mock_vector_store, filename, description, message) -> None:
        with pytest.raises(ValidationError, match=message):
            await service.ingest_document(b"text", "text/plain", filename, description)
        mock_vector_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_document_rejected(self, service, mock_vector_store) -> None:
        with pytest.raises(ValidationError, match="Document contains no text"):
            await service.ingest_document(b" \n\n ", "text/plain", "blank.txt", "Blank")
        mock_vector_store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_store_failure_fails_the_call(self, service, mock_vector_store) -> None:
        calls = 0

        async def _flaky(records):
            nonlocal calls
            calls += 1
            if records[0].id.endswith("_chunk1"):
                raise VectorStoreError("write failed", provider_name="chromadb")
            return len(records)

        mock_vector_store.upsert = AsyncMock(side_effect=_flaky)

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest_document(_DOC_TEXT, "text/plain", "faq.txt", "FAQ")

        assert exc_info.value.message == "Failed to process document"
        assert isinstance(exc_info.value.__cause__, VectorStoreError)
        # Siblings were not cancelled.
        assert calls == 3

    @pytest.mark.asyncio
    async def test_embedding_error_propagates_unchanged(self, service, embedding_provider) -> None:
        embedding_provider.embed_single = AsyncMock(side_effect=EmbeddingError("quota exceeded"))

        with pytest.raises(EmbeddingError, match="quota exceeded"):
            await service.ingest_document(_DOC_TEXT, "text/plain", "faq.txt", "FAQ")

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(self, service, embedding_provider) -> None:
        embedding_provider.embed_single = AsyncMock(side_effect=ConfigurationError("no key"))

        with pytest.raises(ConfigurationError):
            await service.ingest_document(_DOC_TEXT, "text/plain", "faq.txt", "FAQ")

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, mock_article_provider, mock_vector_store) -> None:
        in_flight = 0
        peak = 0

        async def _slow_embed(text: str) -> list[float]:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [0.1, 0.2]

        embedder = AsyncMock()
        embedder.embed_single = AsyncMock(side_effect=_slow_embed)
        service = IngestionService(
            normalizer=ContentNormalizer(mock_article_provider),
            chunker=TextChunker(chunk_size=50, overlap=0),
            embedding_provider=embedder,
            vector_store=mock_vector_store,
            max_concurrency=2,
        )

        item = await service.ingest_document(("word " * 100).encode(), "text/plain", "a.txt", "Words")

        assert item.chunk_count == 10
        assert 1 < peak <= 2
