"""Reconstructs logical knowledge-base items from raw vector records.

The vector store only knows physical records.  This service pages through
every stored ID, fetches the metadata, and rebuilds what an administrator
thinks of as content: one :class:`UrlItem` per URL record and one
:class:`DocumentItem` per document, however many chunk records back it.

The vector store is the only source of truth; nothing is cached between
calls.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from supportkb.models.content import (
    DOCUMENT_TYPE,
    ContentItem,
    DocumentItem,
    UrlItem,
    VectorRecord,
    split_chunk_id,
)
from supportkb.utils.errors import FetchError, VectorStoreError

if TYPE_CHECKING:
    from supportkb.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def is_url_record(metadata: dict[str, Any]) -> bool:
    """URL records are flagged ``isUrl`` or carry a ``url`` without a ``type``."""
    if metadata.get("isUrl") is True:
        return True
    return "url" in metadata and "type" not in metadata


def is_document_chunk(metadata: dict[str, Any]) -> bool:
    return metadata.get("type") == DOCUMENT_TYPE


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch-milliseconds number into a datetime.

    Unparseable values map to the Unix epoch so the item still lists.
    """
    if isinstance(value, bool):
        return _EPOCH
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return _EPOCH
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return _EPOCH


class _DocumentGroup:
    """Chunks of one document seen so far, plus the representative chunk."""

    __slots__ = ("base_id", "count", "representative", "rep_index")

    def __init__(self, base_id: str) -> None:
        self.base_id = base_id
        self.count = 0
        self.representative: VectorRecord | None = None
        self.rep_index: float = float("inf")

    def add(self, record: VectorRecord, index: int | None) -> None:
        self.count += 1
        rank = float("inf") if index is None else index
        if self.representative is None or rank < self.rep_index:
            self.representative = record
            self.rep_index = rank


class ContentListingService:
    """Lists every logical item stored in the knowledge base.

    Parameters
    ----------
    vector_store:
        The store to scan.
    page_size:
        IDs requested per listing page (also the fetch batch size).
    """

    def __init__(self, vector_store: IVectorStoreProvider, page_size: int = 100) -> None:
        self._vector_store = vector_store
        self._page_size = max(1, page_size)

    async def list_items(self) -> list[ContentItem]:
        """Return all URL and document items, newest first.

        Document metadata comes from the chunk with the lowest
        ``chunk_index``, so the result does not depend on listing order.

        Raises
        ------
        FetchError
            If any listing page or metadata fetch fails.  No partial
            result is returned.
        """
        try:
            records = await self._scan()
        except VectorStoreError as exc:
            logger.error("content_list_failed", error=str(exc))
            raise FetchError(provider_name=exc.provider_name) from exc

        items = self._group(records)
        items.sort(key=lambda item: item.created_at, reverse=True)
        logger.info(
            "content_listed",
            records=len(records),
            items=len(items),
        )
        return items

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _scan(self) -> list[VectorRecord]:
        """Page through every ID and fetch each page's metadata."""
        records: list[VectorRecord] = []
        token: str | None = None
        while True:
            page = await self._vector_store.list_ids(
                limit=self._page_size, pagination_token=token
            )
            if page.ids:
                fetched = await self._vector_store.fetch(page.ids)
                records.extend(fetched[i] for i in page.ids if i in fetched)
            if not page.next_token or page.next_token == token:
                break
            token = page.next_token
        return records

    @staticmethod
    def _group(records: list[VectorRecord]) -> list[ContentItem]:
        items: list[ContentItem] = []
        groups: dict[str, _DocumentGroup] = {}

        for record in records:
            meta = record.metadata
            if is_url_record(meta):
                items.append(
                    UrlItem(
                        id=record.id,
                        url=str(meta.get("url", "")),
                        description=str(meta.get("description", "")),
                        created_at=parse_timestamp(meta.get("timestamp")),
                    )
                )
            elif is_document_chunk(meta):
                base_id, parsed_index = split_chunk_id(record.id)
                base_id = str(meta.get("parent_id") or base_id)
                index = meta.get("chunk_index", parsed_index)
                if not isinstance(index, int) or isinstance(index, bool):
                    index = parsed_index
                groups.setdefault(base_id, _DocumentGroup(base_id)).add(record, index)
            else:
                logger.debug("content_record_skipped", id=record.id)

        for group in groups.values():
            meta = group.representative.metadata
            items.append(
                DocumentItem(
                    id=group.base_id,
                    filename=str(meta.get("filename", "")),
                    description=str(meta.get("description", "")),
                    created_at=parse_timestamp(meta.get("timestamp")),
                    chunk_count=group.count,
                )
            )
        return items
