"""End-to-end content lifecycle against a real ChromaDB collection.

Ingestion, listing, search and deletion share one persistent store; only
embeddings (deterministic hashes) and page fetching are mocked.
"""

from __future__ import annotations

import pytest
from conftest import SAMPLE_PAGE_TEXT

from supportkb.models.content import DocumentItem, UrlItem
from supportkb.models.tool_result import NoMatchToolResult, TextToolResult
from supportkb.services.content_deletion_service import ContentDeletionService
from supportkb.services.content_listing_service import ContentListingService
from supportkb.services.ingestion.chunker import TextChunker
from supportkb.services.ingestion.content_normalizer import ContentNormalizer
from supportkb.services.ingestion.ingestion_service import IngestionService
from supportkb.services.knowledge_search_service import KnowledgeSearchService

_DOC_TEXT = "abcd " * 240


@pytest.fixture
def services(mock_article_provider, embedding_provider, chroma_store) -> dict:
    return {
        "ingestion": IngestionService(
            normalizer=ContentNormalizer(mock_article_provider),
            chunker=TextChunker(chunk_size=500, overlap=50),
            embedding_provider=embedding_provider,
            vector_store=chroma_store,
        ),
        "listing": ContentListingService(chroma_store, page_size=2),
        "deletion": ContentDeletionService(chroma_store, page_size=2),
        "search": KnowledgeSearchService(embedding_provider, chroma_store),
        "store": chroma_store,
    }


class TestContentLifecycle:
    @pytest.mark.asyncio
    async def test_document_round_trip(self, services) -> None:
        item = await services["ingestion"].ingest_document(
            _DOC_TEXT.encode(), "text/plain", "faq.txt", "FAQ"
        )
        assert item.chunk_count == 3

        (listed,) = await services["listing"].list_items()
        assert isinstance(listed, DocumentItem)
        assert listed.id == item.id
        assert listed.chunk_count == 3
        assert listed.filename == "faq.txt"
        assert listed.created_at == item.created_at

        deleted = await services["deletion"].delete_item(item.id)

        assert deleted == 3
        assert await services["listing"].list_items() == []
        assert (await services["store"].list_ids()).ids == []

    @pytest.mark.asyncio
    async def test_url_round_trip(self, services) -> None:
        item = await services["ingestion"].ingest_url("https://shop.example/returns", "Returns")

        (listed,) = await services["listing"].list_items()
        assert isinstance(listed, UrlItem)
        assert listed.url == "https://shop.example/returns"

        assert await services["deletion"].delete_item(item.id) == 1
        assert await services["deletion"].delete_item(item.id) == 0
        assert await services["listing"].list_items() == []

    @pytest.mark.asyncio
    async def test_deleting_one_document_keeps_the_others(self, services) -> None:
        first = await services["ingestion"].ingest_document(
            _DOC_TEXT.encode(), "text/plain", "a.txt", "A"
        )
        second = await services["ingestion"].ingest_document(
            b"Short second document.", "text/plain", "b.txt", "B"
        )
        url = await services["ingestion"].ingest_url("https://shop.example/returns", "Returns")

        await services["deletion"].delete_item(first.id)

        remaining = {item.id for item in await services["listing"].list_items()}
        assert remaining == {second.id, url.id}

    @pytest.mark.asyncio
    async def test_search_finds_stored_page(self, services) -> None:
        await services["ingestion"].ingest_url("https://shop.example/returns", "Returns")

        # Hash embeddings make the page text its own nearest neighbour.
        result = await services["search"].search(SAMPLE_PAGE_TEXT)

        assert isinstance(result, TextToolResult)
        assert result.content == SAMPLE_PAGE_TEXT
        assert result.sources == ["https://shop.example/returns"]

    @pytest.mark.asyncio
    async def test_search_unrelated_topic(self, services) -> None:
        await services["ingestion"].ingest_url("https://shop.example/returns", "Returns")

        result = await services["search"].search("completely unrelated words")

        assert isinstance(result, NoMatchToolResult)
