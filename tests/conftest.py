"""Shared pytest fixtures for the supportKB test suite."""

from __future__ import annotations

import hashlib
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from supportkb.config.settings import Settings
from supportkb.interfaces.article_provider import ArticleContent, IArticleProvider
from supportkb.interfaces.embedding_provider import IEmbeddingProvider
from supportkb.interfaces.vector_store_provider import IVectorStoreProvider
from supportkb.models.content import IdPage, VectorMatch, VectorRecord
from supportkb.providers.vector_store.chromadb_provider import ChromaDBProvider

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing every on-disk store at *tmp_path*."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        openai_base_url="",
        openai_embedding_model="",
        chromadb_persist_dir=str(tmp_path / "chromadb"),
        chromadb_collection="test_kb",
        feedback_db_path=str(tmp_path / "feedback.db"),
    )


# ---------------------------------------------------------------------------
# Embedding fixtures
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 64


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic unit vector by hashing *text*.

    Same text always produces the same vector, so a query for a stored
    text scores a cosine similarity of 1.0 against it.
    """
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim:
        raw += hashlib.sha256(raw).digest()
    values = [b / 255.0 - 0.5 for b in raw[:dim]]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [_hash_to_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        return _hash_to_vector(text)

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def hash_vector():
    """Expose the deterministic embedding function to tests."""
    return _hash_to_vector


# ---------------------------------------------------------------------------
# Vector store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def chroma_store(tmp_path: Path) -> ChromaDBProvider:
    """A real ChromaDB store persisted under *tmp_path*."""
    return ChromaDBProvider(
        persist_directory=str(tmp_path / "chromadb"),
        collection_name="test_kb",
    )


@pytest.fixture
def mock_vector_store() -> IVectorStoreProvider:
    """Mock IVectorStoreProvider with an empty store's behaviour."""
    mock = MagicMock(spec=IVectorStoreProvider)
    mock.get_provider_name.return_value = "mock-store"
    mock.is_available.return_value = True
    mock.upsert = AsyncMock(side_effect=lambda records: len(records))
    mock.list_ids = AsyncMock(return_value=IdPage(ids=[], next_token=None))
    mock.fetch = AsyncMock(return_value={})
    mock.delete = AsyncMock(side_effect=lambda ids: len(ids))
    mock.delete_one = AsyncMock(return_value=1)
    mock.query = AsyncMock(return_value=[])
    return mock


# ---------------------------------------------------------------------------
# Article fixtures
# ---------------------------------------------------------------------------

SAMPLE_PAGE_TEXT = (
    "Returns are free within 30 days of delivery. Items must be unused and "
    "in their original packaging. Refunds are issued to the original payment "
    "method within 5 business days."
)


@pytest.fixture
def mock_article_provider() -> IArticleProvider:
    """Mock IArticleProvider returning a sample returns-policy page."""
    mock = MagicMock(spec=IArticleProvider)
    mock.get_provider_name.return_value = "mock-article"
    mock.extract_content = AsyncMock(
        return_value=ArticleContent(
            url="https://shop.example/returns",
            text=SAMPLE_PAGE_TEXT,
            title="Returns",
        )
    )
    return mock


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def make_url_record(record_id: str, url: str, timestamp: str, **extra) -> VectorRecord:
    metadata = {
        "url": url,
        "description": f"Page {url}",
        "content": f"Content of {url}",
        "timestamp": timestamp,
        "isUrl": True,
    }
    metadata.update(extra)
    return VectorRecord(id=record_id, values=_hash_to_vector(record_id), metadata=metadata)


def make_chunk_record(
    base_id: str,
    index: int,
    timestamp: str = "2024-05-01T10:00:00+00:00",
    filename: str = "faq.txt",
    description: str = "FAQ",
    with_parent: bool = True,
) -> VectorRecord:
    metadata = {
        "filename": filename,
        "description": description,
        "content": f"{base_id} chunk {index}",
        "timestamp": timestamp,
        "type": "document",
    }
    if with_parent:
        metadata["parent_id"] = base_id
        metadata["chunk_index"] = index
    record_id = f"{base_id}_chunk{index}"
    return VectorRecord(id=record_id, values=_hash_to_vector(record_id), metadata=metadata)


def make_match(record_id: str, score: float, **metadata) -> VectorMatch:
    return VectorMatch(id=record_id, score=score, metadata=metadata)
