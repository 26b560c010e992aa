"""Knowledge-base content models.

Two layers are modelled here:

* **Physical records** -- what the vector store holds: an ID, an embedding
  and a flat metadata dict (:class:`VectorRecord`, :class:`VectorMatch`,
  :class:`IdPage`).
* **Logical items** -- what administrators see: one :class:`UrlItem` per
  submitted URL, one :class:`DocumentItem` per uploaded document no matter
  how many chunk records back it.  :data:`ContentItem` is the tagged union
  of the two, discriminated by ``type``.

Document chunk IDs follow ``"<base_id>_chunk<index>"``.  Base IDs never
contain ``"_chunk"``, so the literal prefix ``"<base_id>_chunk"`` selects
exactly one document's chunks (``doc_1_chunk`` never matches
``doc_10_chunk0``).  Chunks also carry ``parent_id`` and ``chunk_index`` in
their metadata so grouping never has to parse IDs for new records.

Logical models serialise with camelCase keys (``createdAt``,
``chunkCount``) to match the admin front end; they accept either spelling
on input.  All models are frozen.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

URL_ID_PREFIX = "url_"
DOCUMENT_ID_PREFIX = "doc_"
CHUNK_SEPARATOR = "_chunk"

DOCUMENT_TYPE = "document"


def chunk_id(base_id: str, index: int) -> str:
    """Return the physical record ID of chunk *index* of document *base_id*."""
    return f"{base_id}{CHUNK_SEPARATOR}{index}"


def chunk_prefix(base_id: str) -> str:
    """Return the ID prefix shared by every chunk of document *base_id*."""
    return f"{base_id}{CHUNK_SEPARATOR}"


def split_chunk_id(record_id: str) -> tuple[str, int | None]:
    """Split a chunk record ID into ``(base_id, index)``.

    IDs without the chunk separator come back as ``(record_id, None)``.
    The index is ``None`` as well when the suffix is not an integer.
    """
    base, sep, suffix = record_id.partition(CHUNK_SEPARATOR)
    if not sep:
        return record_id, None
    return base, int(suffix) if suffix.isdigit() else None


# ---------------------------------------------------------------------------
# Physical records
# ---------------------------------------------------------------------------


class VectorRecord(BaseModel):
    """One embedding plus metadata, keyed by a string ID."""

    model_config = ConfigDict(frozen=True)

    id: str
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """A similarity-search hit.  ``score`` is cosine similarity in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class IdPage(BaseModel):
    """One page of an ID listing; ``next_token`` is ``None`` on the last page."""

    model_config = ConfigDict(frozen=True)

    ids: list[str] = Field(default_factory=list)
    next_token: str | None = None


# ---------------------------------------------------------------------------
# Logical items
# ---------------------------------------------------------------------------


class _LogicalItem(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UrlItem(_LogicalItem):
    """A submitted web page, backed by exactly one physical record."""

    type: Literal["url"] = "url"
    id: str
    url: str
    description: str
    created_at: datetime


class DocumentItem(_LogicalItem):
    """An uploaded document, backed by ``chunk_count`` chunk records."""

    type: Literal["document"] = "document"
    id: str
    filename: str
    description: str
    created_at: datetime
    chunk_count: int = Field(ge=0)


ContentItem = Annotated[Union[UrlItem, DocumentItem], Field(discriminator="type")]
