"""Abstract base class for web-page text extraction providers.

Defines the contract for turning a URL into readable plain text.  The
concrete adapter fetches HTML with httpx and extracts text with
BeautifulSoup; alternatives (headless browser, readability engines) can be
swapped in behind the same interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ArticleContent:
    """Text extracted from a web page.

    Attributes
    ----------
    url:
        The page the content was extracted from.
    text:
        Plain text with markup removed and whitespace collapsed.  Empty
        when the page has no extractable text.
    title:
        The page ``<title>``, if any.
    """

    url: str
    text: str
    title: str = ""


class IArticleProvider(ABC):
    """Contract for services that extract readable text from web URLs."""

    @abstractmethod
    async def extract_content(self, url: str) -> ArticleContent:
        """Fetch *url* and extract its readable text.

        Returns
        -------
        ArticleContent
            Always returned on a successful fetch; ``text`` is empty when
            nothing could be extracted.

        Raises
        ------
        supportkb.utils.errors.ScrapeError
            On network failure or a non-2xx response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"web_scraper"``."""
