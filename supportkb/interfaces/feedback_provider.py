"""Abstract base class for chat-rating persistence.

Customers rate a finished support conversation from 1 to 5.  This
contract stores those ratings and reports aggregates; the concrete
adapter uses SQLite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

MIN_RATING = 1
MAX_RATING = 5


class IFeedbackProvider(ABC):
    """Contract for rating persistence services."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create storage structures if they do not exist yet."""

    @abstractmethod
    async def submit_rating(self, rating: int, session_id: str | None = None) -> dict[str, Any]:
        """Persist one rating and return the stored row.

        Parameters
        ----------
        rating:
            Integer between :data:`MIN_RATING` and :data:`MAX_RATING`.
        session_id:
            Optional chat session identifier.

        Raises
        ------
        supportkb.utils.errors.ValidationError
            If *rating* is outside the accepted range.
        """

    @abstractmethod
    async def get_rating_summary(self) -> dict[str, Any]:
        """Return ``{"total_ratings", "average", "by_value"}``."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
