"""Research service - gather web context and ASINs through Brave Search."""

import logging
import time

from ..clients.brave import BraveSearchClient, SearchError, extract_asin
from ..models import SearchResult

logger = logging.getLogger(__name__)

REVIEW_QUERIES = (
    "{name} レビュー 口コミ",
    "{name} Amazon 価格",
    "{name} メリット デメリット",
)
COMPARISON_QUERIES = (
    "{name} レビュー 口コミ",
    "{name} 比較 特徴",
)


class ResearchService:
    """Collect search snippets for article prompts."""

    def __init__(self, brave: BraveSearchClient, query_interval: float = 1.5):
        self.brave = brave
        self.query_interval = query_interval

    def research(
        self,
        product_name: str,
        queries: tuple[str, ...] = REVIEW_QUERIES,
        count: int = 5,
    ) -> list[SearchResult]:
        """Run each query for the product and concatenate the hits.

        A failed query is logged and skipped.
        """
        results: list[SearchResult] = []
        for template in queries:
            query = template.format(name=product_name)
            try:
                results.extend(self.brave.search(query, count=count))
            except SearchError as e:
                logger.warning(f"Search failed for '{query}': {e}")
            time.sleep(self.query_interval)
        print(f"  {len(results)} search results for {product_name}", flush=True)
        return results

    def search_once(self, query: str, count: int = 5) -> list[SearchResult]:
        """Single query; failures yield no results."""
        try:
            return self.brave.search(query, count=count)
        except SearchError as e:
            logger.warning(f"Search failed for '{query}': {e}")
            return []

    def find_asin(self, product_name: str, count: int = 3) -> str | None:
        """Look up the product's ASIN through a site:amazon.co.jp search."""
        try:
            results = self.brave.search(f"{product_name} site:amazon.co.jp", count=count)
        except SearchError as e:
            logger.warning(f"ASIN search failed for {product_name}: {e}")
            return None

        for result in results:
            asin = extract_asin(result.url)
            if asin:
                print(f"  ASIN: {asin}", flush=True)
                return asin
        return None


def format_context(results: list[SearchResult]) -> str:
    """Search hits as prompt lines."""
    return "\n".join(r.as_context_line() for r in results)
