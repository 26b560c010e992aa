"""Article extraction providers.

WebScraperProvider implements IArticleProvider: it fetches a page (through
the configured scrape proxy when one is set) and extracts the text of its
main content region with BeautifulSoup.  URL ingestion embeds that text.
"""

from supportkb.providers.article.web_scraper_provider import WebScraperProvider

__all__ = ["WebScraperProvider"]
