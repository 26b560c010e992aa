"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into fixed-dimension vectors.  The
concrete adapter wraps the OpenAI embeddings API; any OpenAI-compatible
endpoint works through ``OPENAI_BASE_URL``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIEmbeddingProvider (supportkb/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services.

    Vectors produced here are stored by
    :class:`~supportkb.interfaces.vector_store_provider.IVectorStoreProvider`
    and compared against query vectors at search time, so the dimension
    must stay constant for the lifetime of a collection.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more strings to embed.  Implementations batch internally
            if the API has a per-call limit.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*.

        Raises
        ------
        supportkb.utils.errors.EmbeddingError
            If the embedding API call fails.
        supportkb.utils.errors.ConfigurationError
            If the provider has no credentials.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the produced vectors.

        Example values: ``1536`` (``text-embedding-3-small``),
        ``3072`` (``text-embedding-3-large``).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
