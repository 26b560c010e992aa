"""Web scraper article provider using httpx and BeautifulSoup.

Fetches HTML through an optional same-origin proxy, strips navigation and
boilerplate elements, and returns the text of the main content region.
"""

from __future__ import annotations

import re

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from supportkb.interfaces.article_provider import ArticleContent, IArticleProvider
from supportkb.utils.errors import ScrapeError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 15.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; supportKB/0.1)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Removed before extraction.
_BOILERPLATE_SELECTOR = 'script, style, nav, header, footer, [role="navigation"]'
# Candidate main-content regions, in any order of appearance.
_MAIN_SELECTOR = 'main, article, [role="main"], .content, #content, .main'
# Used when the page has no recognisable main region.
_FALLBACK_SELECTOR = "p, h1, h2, h3, h4, h5, h6"

_WHITESPACE_RE = re.compile(r"\s+")


def extract_text(html: str) -> tuple[str, str]:
    """Return ``(title, text)`` extracted from an HTML document.

    Text comes from every main-content region, or from all paragraphs and
    headings when there is none.  Regions nested inside another matched
    region are skipped so their text is not counted twice.  Runs of
    whitespace collapse to a single space.
    """
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""

    for element in soup.select(_BOILERPLATE_SELECTOR):
        element.decompose()

    regions = soup.select(_MAIN_SELECTOR)
    if regions:
        region_ids = {id(r) for r in regions}
        outermost = [r for r in regions if not _has_ancestor_in(r, region_ids)]
        parts = [r.get_text(" ") for r in outermost]
    else:
        parts = [el.get_text(" ") for el in soup.select(_FALLBACK_SELECTOR)]

    text = _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()
    return title, text


def _has_ancestor_in(element: Tag, ids: set[int]) -> bool:
    return any(id(parent) in ids for parent in element.parents)


class WebScraperProvider(IArticleProvider):
    """Article extraction backed by httpx + BeautifulSoup.

    When ``proxy_url`` is set, pages are requested as
    ``GET {proxy_url}?url=<target>`` instead of directly.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        proxy_url: str = "",
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._proxy_url = proxy_url
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # IArticleProvider implementation
    # ------------------------------------------------------------------

    async def extract_content(self, url: str) -> ArticleContent:
        """Fetch *url* and extract readable text from its main region."""
        try:
            if self._proxy_url:
                response = await self._client.get(
                    self._proxy_url, params={"url": url}, headers=_DEFAULT_HEADERS
                )
            else:
                response = await self._client.get(url, headers=_DEFAULT_HEADERS)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ScrapeError(
                message=f"Timeout fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise ScrapeError(
                message=f"HTTP {exc.response.status_code} for {url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ScrapeError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        title, text = extract_text(response.text)
        if not text:
            logger.warning("scrape_extraction_empty", url=url)

        logger.info("article_extracted", url=url, title=title, text_length=len(text))
        return ArticleContent(url=url, text=text, title=title)

    async def aclose(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "web_scraper"
