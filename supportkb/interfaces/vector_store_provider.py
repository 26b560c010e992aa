"""Abstract base class for vector-store service providers.

Defines the minimal record-level contract the knowledge base needs:
upsert, paginated ID listing (optionally by ID prefix), batch fetch,
batch/single delete and nearest-neighbour query.  Logical concepts
(URL items, documents, chunk grouping) live in the services, not here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from supportkb.models.content import IdPage, VectorMatch, VectorRecord


# Concrete implementation: ChromaDBProvider (supportkb/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector stores holding knowledge-base records.

    All data methods are async so network-backed stores can be swapped in
    without blocking the event loop.  Every failure is reported as
    :class:`~supportkb.utils.errors.VectorStoreError`.
    """

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace *records* keyed by ``record.id``.

        Returns
        -------
        int
            The number of records written.
        """

    @abstractmethod
    async def list_ids(
        self,
        prefix: str | None = None,
        limit: int = 100,
        pagination_token: str | None = None,
    ) -> IdPage:
        """Return one page of stored record IDs.

        Parameters
        ----------
        prefix:
            If given, only IDs starting with this literal string are
            returned.
        limit:
            Maximum number of IDs in the page.
        pagination_token:
            ``next_token`` of the previous page; ``None`` starts from the
            beginning.

        Returns
        -------
        IdPage
            The IDs plus a continuation token, which is ``None`` once the
            listing is exhausted.
        """

    @abstractmethod
    async def fetch(self, ids: list[str]) -> dict[str, VectorRecord]:
        """Return the stored records for *ids*, keyed by ID.

        Missing IDs are absent from the result.  Vectors may be omitted
        (``values == []``); metadata is always included.
        """

    @abstractmethod
    async def delete(self, ids: list[str]) -> int:
        """Delete every record in *ids*.

        IDs that do not exist are ignored.

        Returns
        -------
        int
            The number of records actually removed.
        """

    @abstractmethod
    async def delete_one(self, record_id: str) -> int:
        """Delete a single record; ``0`` if it did not exist."""

    @abstractmethod
    async def query(self, vector: list[float], top_k: int = 20) -> list[VectorMatch]:
        """Return up to *top_k* records nearest to *vector*, best first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is reachable."""
