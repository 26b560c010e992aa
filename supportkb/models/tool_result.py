"""Results returned by the chat assistant's knowledge-base tool.

Each result variant carries a ``kind`` literal so consumers can branch on
it exhaustively instead of probing optional fields.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TextToolResult(BaseModel):
    """Relevant knowledge-base content, joined into one block of text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    content: str
    sources: list[str] = Field(default_factory=list)


class NoMatchToolResult(BaseModel):
    """Nothing in the knowledge base scored above the relevance threshold."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["no_match"] = "no_match"
    message: str = "I don't have specific information about that topic."


ToolResult = Annotated[Union[TextToolResult, NoMatchToolResult], Field(discriminator="kind")]
