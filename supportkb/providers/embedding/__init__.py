"""Embedding provider implementations.

Embeddings convert text into numeric vectors that capture semantic meaning.
The vectors are stored in ChromaDB and compared at search time.

OpenAIEmbeddingProvider is the only implementation; point
``OPENAI_BASE_URL`` at any OpenAI-compatible service to use another host.
"""

from supportkb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
