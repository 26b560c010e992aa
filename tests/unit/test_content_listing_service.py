"""Unit tests for ContentListingService: grouping records into logical items."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from conftest import make_chunk_record, make_url_record

from supportkb.models.content import DocumentItem, IdPage, UrlItem, VectorRecord
from supportkb.services.content_listing_service import (
    ContentListingService,
    is_url_record,
    parse_timestamp,
)
from supportkb.utils.errors import FetchError, VectorStoreError


def _serve(mock_vector_store, records: list[VectorRecord], page_size: int = 2) -> None:
    """Make the mock store page through *records* in fixed-size pages."""
    by_id = {r.id: r for r in records}
    ids = [r.id for r in records]

    async def _list_ids(prefix=None, limit=100, pagination_token=None):
        start = int(pagination_token or 0)
        end = start + page_size
        return IdPage(ids=ids[start:end], next_token=str(end) if end < len(ids) else None)

    async def _fetch(requested):
        return {i: by_id[i] for i in requested if i in by_id}

    mock_vector_store.list_ids = AsyncMock(side_effect=_list_ids)
    mock_vector_store.fetch = AsyncMock(side_effect=_fetch)


class TestHelpers:
    def test_url_record_detection(self) -> None:
        assert is_url_record({"isUrl": True, "url": "https://x"})
        assert is_url_record({"url": "https://x"})
        assert not is_url_record({"url": "https://x", "type": "document"})
        assert not is_url_record({"type": "document", "filename": "a.txt"})

    def test_parse_iso_timestamp(self) -> None:
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(
            2024, 5, 1, 10, tzinfo=timezone.utc
        )

    def test_parse_naive_timestamp_as_utc(self) -> None:
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo is not None

    def test_parse_epoch_millis(self) -> None:
        assert parse_timestamp(1714557600000) == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", True])
    def test_unparseable_maps_to_epoch(self, value) -> None:
        assert parse_timestamp(value) == datetime.fromtimestamp(0, tz=timezone.utc)

    @pytest.mark.parametrize(
        "value", [10**20, -(10**20), 1e300, float("inf"), float("-inf"), float("nan")]
    )
    def test_out_of_range_epoch_maps_to_epoch(self, value) -> None:
        assert parse_timestamp(value) == datetime.fromtimestamp(0, tz=timezone.utc)


class TestListItems:
    @pytest.mark.asyncio
    async def test_empty_store(self, mock_vector_store) -> None:
        assert await ContentListingService(mock_vector_store).list_items() == []

    @pytest.mark.asyncio
    async def test_groups_chunks_into_documents(self, mock_vector_store) -> None:
        records = [
            make_url_record("url_a", "https://shop.example/a", "2024-05-03T09:00:00Z"),
            *(make_chunk_record("doc_1", i, timestamp="2024-05-01T10:00:00Z") for i in range(3)),
            *(make_chunk_record("doc_10", i, timestamp="2024-05-02T10:00:00Z") for i in range(2)),
        ]
        _serve(mock_vector_store, records)

        items = await ContentListingService(mock_vector_store, page_size=2).list_items()

        assert [item.id for item in items] == ["url_a", "doc_10", "doc_1"]
        assert isinstance(items[0], UrlItem)
        assert items[0].url == "https://shop.example/a"
        counts = {item.id: item.chunk_count for item in items if isinstance(item, DocumentItem)}
        assert counts == {"doc_1": 3, "doc_10": 2}

    @pytest.mark.asyncio
    async def test_legacy_chunks_grouped_by_id(self, mock_vector_store) -> None:
        records = [make_chunk_record("doc_7", i, with_parent=False) for i in range(4)]
        _serve(mock_vector_store, records)

        (item,) = await ContentListingService(mock_vector_store).list_items()

        assert item.id == "doc_7"
        assert item.chunk_count == 4

    @pytest.mark.asyncio
    async def test_lowest_chunk_supplies_metadata(self, mock_vector_store) -> None:
        records = [
            make_chunk_record("doc_1", 2, description="stale", timestamp="2024-01-01T00:00:00Z"),
            make_chunk_record("doc_1", 0, description="Shipping FAQ", timestamp="2024-05-01T10:00:00Z"),
            make_chunk_record("doc_1", 1, description="stale", timestamp="2024-01-01T00:00:00Z"),
        ]
        _serve(mock_vector_store, records)

        (item,) = await ContentListingService(mock_vector_store).list_items()

        assert item.description == "Shipping FAQ"
        assert item.created_at == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_unknown_records_are_skipped(self, mock_vector_store) -> None:
        stray = VectorRecord(id="misc_1", values=[0.1], metadata={"note": "orphan"})
        _serve(mock_vector_store, [stray, make_url_record("url_a", "https://a", "2024-05-01T00:00:00Z")])

        items = await ContentListingService(mock_vector_store).list_items()

        assert [item.id for item in items] == ["url_a"]

    @pytest.mark.asyncio
    async def test_serialises_with_camel_case(self, mock_vector_store) -> None:
        _serve(mock_vector_store, [make_chunk_record("doc_1", 0)])

        (item,) = await ContentListingService(mock_vector_store).list_items()
        data = item.model_dump(by_alias=True)

        assert data["type"] == "document"
        assert data["chunkCount"] == 1
        assert "createdAt" in data

    @pytest.mark.asyncio
    async def test_stops_on_repeated_token(self, mock_vector_store) -> None:
        mock_vector_store.list_ids = AsyncMock(return_value=IdPage(ids=["url_a"], next_token="5"))
        mock_vector_store.fetch = AsyncMock(
            return_value={"url_a": make_url_record("url_a", "https://a", "2024-05-01T00:00:00Z")}
        )

        items = await ContentListingService(mock_vector_store).list_items()

        assert len(items) == 2
        assert mock_vector_store.list_ids.await_count == 2

    @pytest.mark.asyncio
    async def test_store_failure_is_fetch_error(self, mock_vector_store) -> None:
        mock_vector_store.list_ids = AsyncMock(side_effect=VectorStoreError("down", provider_name="chromadb"))

        with pytest.raises(FetchError) as exc_info:
            await ContentListingService(mock_vector_store).list_items()
        assert exc_info.value.message == "Failed to fetch items"

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_no_partial_result(self, mock_vector_store) -> None:
        _serve(mock_vector_store, [make_chunk_record("doc_1", i) for i in range(4)])
        mock_vector_store.fetch.side_effect = [
            {"doc_1_chunk0": make_chunk_record("doc_1", 0), "doc_1_chunk1": make_chunk_record("doc_1", 1)},
            VectorStoreError("timeout"),
        ]

        with pytest.raises(FetchError):
            await ContentListingService(mock_vector_store, page_size=2).list_items()
