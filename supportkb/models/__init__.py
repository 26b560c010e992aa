"""Pydantic models for supportKB.

- **content** -- physical vector records and the logical items (URLs and
  documents) reconstructed from them.
- **tool_result** -- tagged results of the knowledge-base search tool.
"""

from supportkb.models.content import (
    ContentItem,
    DocumentItem,
    IdPage,
    UrlItem,
    VectorMatch,
    VectorRecord,
)
from supportkb.models.tool_result import NoMatchToolResult, TextToolResult, ToolResult

__all__ = [
    "ContentItem",
    "DocumentItem",
    "IdPage",
    "NoMatchToolResult",
    "TextToolResult",
    "ToolResult",
    "UrlItem",
    "VectorMatch",
    "VectorRecord",
]
