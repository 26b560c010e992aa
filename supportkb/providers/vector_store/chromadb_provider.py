"""ChromaDB vector store provider adapter.

Wraps `chromadb.PersistentClient` to implement :class:`IVectorStoreProvider`.
Uses cosine distance for similarity search.  Fully local, so no hosted
vector service is required.
"""

from __future__ import annotations

import os
from typing import Any

# Disable ChromaDB telemetry before importing chromadb.  A version mismatch
# between ChromaDB's bundled PostHog client and the installed one raises
# "capture() takes 1 positional argument but 3 were given" otherwise.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from supportkb.interfaces.vector_store_provider import IVectorStoreProvider
from supportkb.models.content import IdPage, VectorMatch, VectorRecord
from supportkb.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

_UPSERT_BATCH_SIZE = 500
# Rows read per round trip while scanning for prefixed IDs.  Kept well
# under SQLite's bind-parameter ceiling.
_SCAN_PAGE_SIZE = 1000


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    Every record arrives with a pre-computed vector, so ChromaDB's built-in
    embedding is never invoked.  Without this, ChromaDB downloads its
    default ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "supportKB uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    Record metadata is stored as ChromaDB metadata; the record text lives
    in the ``content`` metadata key so listing and search read it back
    without a second lookup.  ChromaDB calls are synchronous and fast for
    a local store, so they run inline in the async methods.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "support_knowledge_base",
        expected_dimension: int | None = None,
        client: chromadb.ClientAPI | None = None,
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._client = client or chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        # Collections created by an older ChromaDB with the default
        # embedding function reject a different one; reopen without it.
        try:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )

        if expected_dimension is not None:
            self._validate_embedding_dimensions(expected_dimension)

    # ------------------------------------------------------------------
    # Startup validation
    # ------------------------------------------------------------------

    def _validate_embedding_dimensions(self, expected_dim: int) -> None:
        """Fail fast when stored vectors do not match the embedding model.

        A mismatch would make every query fail or return garbage.
        """
        try:
            if self._collection.count() == 0:
                return
            sample = self._collection.peek(limit=1)
            embeddings = sample.get("embeddings") if sample else None
            if embeddings is None or len(embeddings) == 0:
                return
            stored_dim = len(embeddings[0])
        except Exception as exc:
            logger.warning("embedding_dimension_check_skipped", error=str(exc))
            return

        if stored_dim != expected_dim:
            logger.error(
                "embedding_dimension_mismatch",
                stored_dim=stored_dim,
                expected_dim=expected_dim,
            )
            raise VectorStoreError(
                message=(
                    f"Embedding dimension mismatch: collection has {stored_dim}-dim "
                    f"vectors but the embedding model produces {expected_dim}-dim vectors. "
                    "Set OPENAI_EMBEDDING_MODEL to the model used to build the collection."
                ),
                provider_name=self.get_provider_name(),
            )
        logger.info("embedding_dimension_validated", dimension=stored_dim)

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace records, in batches to bound peak memory."""
        if not records:
            return 0

        try:
            total = 0
            for start in range(0, len(records), _UPSERT_BATCH_SIZE):
                batch = records[start : start + _UPSERT_BATCH_SIZE]
                self._collection.upsert(
                    ids=[r.id for r in batch],
                    embeddings=[r.values for r in batch],
                    metadatas=[self._to_chroma_metadata(r.metadata) for r in batch],
                )
                total += len(batch)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("chromadb_upsert", count=total)
        return total

    async def list_ids(
        self,
        prefix: str | None = None,
        limit: int = 100,
        pagination_token: str | None = None,
    ) -> IdPage:
        """Return one page of IDs, scanning the collection in insertion order.

        ChromaDB has no ID-prefix filter, so rows are read in
        ``_SCAN_PAGE_SIZE`` pages and filtered here.  The pagination token
        is the row offset where the next scan resumes.
        """
        limit = max(1, limit)
        try:
            position = int(pagination_token) if pagination_token else 0
        except ValueError as exc:
            raise VectorStoreError(
                message=f"Invalid pagination token: {pagination_token!r}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids: list[str] = []
        exhausted = False
        try:
            while len(ids) < limit and not exhausted:
                start = position
                page = self._collection.get(include=[], limit=_SCAN_PAGE_SIZE, offset=start)
                batch = page["ids"] or []
                for record_id in batch:
                    position += 1
                    if prefix is None or record_id.startswith(prefix):
                        ids.append(record_id)
                        if len(ids) == limit:
                            break
                consumed_all = position == start + len(batch)
                exhausted = consumed_all and len(batch) < _SCAN_PAGE_SIZE
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB list_ids failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        return IdPage(ids=ids, next_token=None if exhausted else str(position))

    async def fetch(self, ids: list[str]) -> dict[str, VectorRecord]:
        if not ids:
            return {}
        try:
            result = self._collection.get(ids=ids, include=["metadatas"])
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB fetch failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        metadatas = result["metadatas"] or [{}] * len(result["ids"])
        return {
            record_id: VectorRecord(id=record_id, metadata=dict(meta or {}))
            for record_id, meta in zip(result["ids"], metadatas, strict=True)
        }

    async def delete(self, ids: list[str]) -> int:
        """Delete the given IDs; IDs that are not stored are skipped."""
        if not ids:
            return 0
        try:
            existing = self._collection.get(ids=ids, include=[])["ids"] or []
            if existing:
                self._collection.delete(ids=list(existing))
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB delete failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_delete", requested=len(ids), deleted=len(existing))
        return len(existing)

    async def delete_one(self, record_id: str) -> int:
        return await self.delete([record_id])

    async def query(self, vector: list[float], top_k: int = 20) -> list[VectorMatch]:
        """Nearest-neighbour search; scores are ``1 - cosine distance``."""
        try:
            count = self._collection.count()
            if count == 0 or top_k <= 0:
                return []
            results = self._collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, count),
                include=["metadatas", "distances"],
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results["ids"] or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(ids)
        distances = results["distances"][0] if results["distances"] else [1.0] * len(ids)

        matches = [
            VectorMatch(
                id=record_id,
                score=max(0.0, min(1.0, 1.0 - distance)),
                metadata=dict(meta or {}),
            )
            for record_id, meta, distance in zip(ids, metadatas, distances, strict=True)
        ]
        logger.debug(
            "chromadb_query",
            results_count=len(matches),
            top_score=matches[0].score if matches else 0.0,
        )
        return matches

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_chroma_metadata(metadata: dict[str, Any]) -> dict[str, str | int | float | bool]:
        """Coerce a metadata dict to ChromaDB's scalar-only value types.

        ``None`` values are dropped; anything that is not a str, int, float
        or bool is stored as its string form.
        """
        meta: dict[str, str | int | float | bool] = {}
        for key, value in metadata.items():
            if value is None:
                continue
            if isinstance(value, (str, int, float, bool)):
                meta[key] = value
            else:
                meta[key] = str(value)
        return meta
