"""Public interface definitions for all external service providers.

Every external service is reached only through the abstract base classes
in this package.  Concrete adapters live in ``supportkb/providers/`` and are
assembled in ``supportkb/main.py`` at startup; tests inject mocks built
from the same interfaces (``MagicMock(spec=IVectorStoreProvider)``).

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementation (in supportkb/providers/)
    ─────────────────────────────────────────────────────────────────────
    IArticleProvider       →  WebScraperProvider
    IEmbeddingProvider     →  OpenAIEmbeddingProvider
    IVectorStoreProvider   →  ChromaDBProvider
    IFeedbackProvider      →  SQLiteFeedbackProvider
"""

from supportkb.interfaces.article_provider import ArticleContent, IArticleProvider
from supportkb.interfaces.embedding_provider import IEmbeddingProvider
from supportkb.interfaces.feedback_provider import IFeedbackProvider
from supportkb.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "ArticleContent",
    "IArticleProvider",
    "IEmbeddingProvider",
    "IFeedbackProvider",
    "IVectorStoreProvider",
]
