"""Vector store provider implementations.

ChromaDB is the sole vector store implementation.  It stores knowledge-base
records on disk at CHROMADB_PERSIST_DIR and supports cosine-similarity
search.

To swap ChromaDB for another vector database, create a new class
implementing IVectorStoreProvider and register it in main.py.
"""

from supportkb.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
