"""Knowledge-base search used by the chat assistant's website-info tool.

Embeds a topic, asks the vector store for its nearest records and keeps
only those scoring above a relevance threshold.  The result is a tagged
union: relevant text with its sources, or an explicit no-match.
"""

from __future__ import annotations

import structlog

from supportkb.interfaces.embedding_provider import IEmbeddingProvider
from supportkb.interfaces.vector_store_provider import IVectorStoreProvider
from supportkb.models.tool_result import NoMatchToolResult, TextToolResult, ToolResult
from supportkb.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)


class KnowledgeSearchService:
    """Semantic lookup over stored URL pages and document chunks.

    Parameters
    ----------
    embedding_provider:
        Embeds the search topic.
    vector_store:
        Holds the knowledge-base records.
    top_k:
        Neighbours requested from the store (default 20).
    min_score:
        Matches must score strictly above this (default 0.7).
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        top_k: int = 20,
        min_score: float = 0.7,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._top_k = top_k
        self._min_score = min_score

    async def search(self, topic: str) -> ToolResult:
        """Return knowledge-base text relevant to *topic*.

        Matching contents are joined with blank lines, best match first.
        Sources are the distinct ``url`` (or ``filename``) values of the
        matches, in the same order.
        """
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError(message="Topic is required")

        vector = await self._embedding_provider.embed_single(topic)
        matches = await self._vector_store.query(vector, top_k=self._top_k)

        relevant = sorted(
            (m for m in matches if m.score > self._min_score),
            key=lambda m: m.score,
            reverse=True,
        )
        if not relevant:
            logger.info("knowledge_search_no_match", topic=topic, candidates=len(matches))
            return NoMatchToolResult()

        contents: list[str] = []
        sources: list[str] = []
        for match in relevant:
            content = match.metadata.get("content")
            if content:
                contents.append(str(content))
            source = match.metadata.get("url") or match.metadata.get("filename")
            if source and source not in sources:
                sources.append(str(source))

        logger.info(
            "knowledge_search",
            topic=topic,
            matches=len(relevant),
            sources=len(sources),
            top_score=relevant[0].score,
        )
        return TextToolResult(content="\n\n".join(contents), sources=sources)
