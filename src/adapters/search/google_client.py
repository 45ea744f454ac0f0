"""
Google Custom Search Client - Primary keyed search provider.

This module implements the Search port using the Google Custom Search
JSON API. It is only added to the rotation when both an API key and a
search engine id (cx) are configured.
"""

from typing import Any, Dict, List, Optional

import httpx

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.exceptions import ProviderError
from src.domain.models import SearchQuery, SearchResult

logger = get_logger(__name__)


# dateRestrict syntax: [d|w|m|y][number]
DATE_RESTRICT = {
    "day": "d1",
    "week": "w1",
    "month": "m1",
    "year": "y1",
}

# The API returns at most 10 items per request
MAX_RESULTS_PER_REQUEST = 10


class GoogleSearchClient(SearchPort):
    """
    Google Custom Search JSON API client.

    Free tier limits:
    - 100 queries per day
    - 10 results per query
    """

    name = "google"

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        base_url: str = "https://www.googleapis.com/customsearch/v1",
        timeout: int = 10,
        user_agent: str = "WebIntel-Bot/1.0",
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the Google client.

        Args:
            api_key: Google API key
            search_engine_id: Programmable Search Engine id (cx)
            base_url: API endpoint
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self._api_key = api_key
        self._search_engine_id = search_engine_id
        self._base_url = base_url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    def _build_params(self, query: SearchQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "key": self._api_key,
            "cx": self._search_engine_id,
            "q": query.query,
            "num": min(query.max_results, MAX_RESULTS_PER_REQUEST),
        }
        if query.domain:
            params["siteSearch"] = query.domain
        if query.date_range:
            params["dateRestrict"] = DATE_RESTRICT[query.date_range]
        if query.language:
            params["lr"] = f"lang_{query.language}"
        return params

    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """Search using the Custom Search JSON API."""
        logger.debug("google_search", query=query.query, max_results=query.max_results)

        try:
            response = await self._client.get(self._base_url, params=self._build_params(query))
        except httpx.TimeoutException as e:
            raise ProviderError("Google search request timed out", provider=self.name) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"HTTP error: {e}", provider=self.name) from e

        if response.status_code != 200:
            try:
                error_message = response.json().get("error", {}).get("message", "Unknown error")
            except (ValueError, AttributeError):
                error_message = f"HTTP {response.status_code}: {response.text[:200]}"
            raise ProviderError(
                f"Google search error: {error_message}",
                provider=self.name,
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"Invalid JSON response from Google: {e}", provider=self.name) from e

        results = []
        for item in data.get("items", []) or []:
            link = item.get("link")
            if not link:
                continue
            results.append(
                SearchResult(
                    title=item.get("title", ""),
                    url=link,
                    snippet=item.get("snippet", ""),
                    published_date=self._published_date(item),
                )
            )

        logger.info("google_search_complete", query=query.query, results_count=len(results))
        return results

    @staticmethod
    def _published_date(item: Dict[str, Any]) -> Optional[str]:
        metatags = (item.get("pagemap") or {}).get("metatags") or []
        if metatags and isinstance(metatags[0], dict):
            return metatags[0].get("article:published_time")
        return None

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
