"""Brave Search API client."""

import re
import time

import requests

from ..config import BRAVE_SEARCH_URL
from ..models import SearchResult

ASIN_PATTERN = re.compile(r"/dp/([A-Z0-9]{10})")


class SearchError(Exception):
    """Brave Search failed after all retries."""
    pass


class BraveSearchClient:
    """Web search with fixed-delay retries and request spacing."""

    def __init__(
        self,
        api_key: str,
        min_interval: float = 1.0,
        max_retries: int = 3,
        rate_limit_wait: float = 3.0,
        error_wait: float = 2.0,
    ):
        self.api_key = api_key
        self.base_url = BRAVE_SEARCH_URL
        self.min_interval = min_interval
        self.max_retries = max_retries
        self.rate_limit_wait = rate_limit_wait
        self.error_wait = error_wait
        self._last_request = 0.0

    def _get_headers(self) -> dict:
        return {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key,
        }

    def _throttle(self) -> None:
        elapsed = time.monotonic() - self._last_request
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)
        self._last_request = time.monotonic()

    def _request_with_retry(self, params: dict) -> dict:
        """GET with waits of attempt * rate_limit_wait on 429, attempt * error_wait on other errors."""
        for attempt in range(1, self.max_retries + 1):
            self._throttle()
            try:
                response = requests.get(
                    self.base_url, params=params, headers=self._get_headers(), timeout=30
                )
                if response.status_code == 429:
                    if attempt == self.max_retries:
                        break
                    wait_time = attempt * self.rate_limit_wait
                    print(f"  Brave rate limited ({attempt}/{self.max_retries}), waiting {wait_time:.0f}s", flush=True)
                    time.sleep(wait_time)
                    continue
                response.raise_for_status()
                return response.json()
            except requests.RequestException as e:
                if attempt == self.max_retries:
                    raise SearchError(f"Brave search failed: {e}") from e
                wait_time = attempt * self.error_wait
                print(f"  Brave error: {e} ({attempt}/{self.max_retries}), retrying in {wait_time:.0f}s", flush=True)
                time.sleep(wait_time)

        raise SearchError("Brave search rate limited on every attempt")

    def search(self, query: str, count: int = 5) -> list[SearchResult]:
        """Run a Japanese web search and return the hits."""
        data = self._request_with_retry({
            "q": query,
            "count": count,
            "search_lang": "jp",
            "country": "jp",
        })
        results = (data.get("web") or {}).get("results") or []
        return [
            SearchResult(
                title=r.get("title", ""),
                description=r.get("description", ""),
                url=r.get("url", ""),
            )
            for r in results
        ]


def extract_asin(url: str) -> str | None:
    """Pull the ASIN out of an Amazon /dp/ URL."""
    match = ASIN_PATTERN.search(url)
    return match.group(1) if match else None
