"""Deletes logical knowledge-base items.

A URL item is one physical record.  A document item is every record whose
ID starts with ``"<base_id>_chunk"``; the separator is part of the prefix,
so deleting ``doc_1`` never touches ``doc_10``'s chunks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from supportkb.models.content import DOCUMENT_ID_PREFIX, chunk_prefix
from supportkb.utils.errors import DeleteError, ValidationError, VectorStoreError

if TYPE_CHECKING:
    from supportkb.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


def is_document_id(item_id: str) -> bool:
    return item_id.startswith(DOCUMENT_ID_PREFIX)


class ContentDeletionService:
    """Resolves a logical item ID to its physical records and deletes them."""

    def __init__(self, vector_store: IVectorStoreProvider, page_size: int = 100) -> None:
        self._vector_store = vector_store
        self._page_size = max(1, page_size)

    async def delete_item(self, item_id: str) -> int:
        """Delete every physical record of the item *item_id*.

        Deleting an item that does not exist succeeds and removes nothing,
        so the call is idempotent.  A failure part-way through is not
        compensated; repeating the call removes what is left.

        Returns
        -------
        int
            The number of physical records removed.

        Raises
        ------
        ValidationError
            If *item_id* is blank.
        DeleteError
            If listing or deleting records fails.
        """
        item_id = (item_id or "").strip()
        if not item_id:
            raise ValidationError(message="ID is required")

        try:
            if is_document_id(item_id):
                # Collect first: offset-based pages shift if deleted mid-scan.
                ids = await self._collect_ids(chunk_prefix(item_id))
                deleted = await self._vector_store.delete(ids) if ids else 0
            else:
                deleted = await self._vector_store.delete_one(item_id)
        except VectorStoreError as exc:
            logger.error("content_delete_failed", id=item_id, error=str(exc))
            raise DeleteError(provider_name=exc.provider_name) from exc

        logger.info("content_deleted", id=item_id, records=deleted)
        return deleted

    async def _collect_ids(self, prefix: str) -> list[str]:
        ids: list[str] = []
        token: str | None = None
        while True:
            page = await self._vector_store.list_ids(
                prefix=prefix, limit=self._page_size, pagination_token=token
            )
            ids.extend(page.ids)
            if not page.next_token or page.next_token == token:
                return ids
            token = page.next_token
