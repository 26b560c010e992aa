"""Content ingestion pipeline for the support knowledge base.

Pipeline stages: **normalize -> chunk -> embed -> store**.

1. **Normalize** (content_normalizer.py / ContentNormalizer) -- validates
   uploads (``text/plain`` only, 10 MiB cap) and extracts page text from
   URLs.

2. **Chunk** (chunker.py / TextChunker) -- splits document text into
   ~500-character overlapping windows, preferring paragraph, then
   sentence, then word boundaries.

3. **Embed** (via IEmbeddingProvider) -- one vector per URL or chunk.

4. **Store** (via IVectorStoreProvider) -- one record per URL, one record
   per document chunk under the ``"<base_id>_chunk<i>"`` ID scheme.
"""

from supportkb.services.ingestion.chunker import TextChunker
from supportkb.services.ingestion.content_normalizer import ContentNormalizer
from supportkb.services.ingestion.ingestion_service import IngestionService

__all__ = [
    "ContentNormalizer",
    "IngestionService",
    "TextChunker",
]
