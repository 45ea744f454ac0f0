"""
Bing Web Search Client - Secondary keyed search provider.

Implements the Search port against the Bing Web Search v7 API. Domain
restriction is folded into the query text as a ``site:`` operator.
"""

from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

import httpx

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.exceptions import ProviderError
from src.domain.models import SearchQuery, SearchResult

logger = get_logger(__name__)


FRESHNESS = {
    "day": "Day",
    "week": "Week",
    "month": "Month",
}

MAX_RESULTS_PER_REQUEST = 50


class BingSearchClient(SearchPort):
    """Bing Web Search API client."""

    name = "bing"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.bing.microsoft.com/v7.0/search",
        timeout: int = 10,
        user_agent: str = "WebIntel-Bot/1.0",
        client: Optional[httpx.AsyncClient] = None,
        today: Callable[[], date] = date.today,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._today = today
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    def _build_params(self, query: SearchQuery) -> Dict[str, Any]:
        text = f"{query.query} site:{query.domain}" if query.domain else query.query
        params: Dict[str, Any] = {
            "q": text,
            "count": min(query.max_results, MAX_RESULTS_PER_REQUEST),
            "setLang": query.language,
        }
        if query.date_range in FRESHNESS:
            params["freshness"] = FRESHNESS[query.date_range]
        elif query.date_range == "year":
            # No keyword for a year; Bing accepts an explicit YYYY-MM-DD..YYYY-MM-DD range
            end = self._today()
            start = end - timedelta(days=365)
            params["freshness"] = f"{start.isoformat()}..{end.isoformat()}"
        return params

    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """Search using the Bing Web Search API."""
        logger.debug("bing_search", query=query.query, max_results=query.max_results)

        try:
            response = await self._client.get(
                self._base_url,
                params=self._build_params(query),
                headers={"Ocp-Apim-Subscription-Key": self._api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError("Bing search request timed out", provider=self.name) from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Bing search error: HTTP {e.response.status_code}",
                provider=self.name,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"HTTP error: {e}", provider=self.name) from e
        except ValueError as e:
            raise ProviderError(f"Invalid JSON response from Bing: {e}", provider=self.name) from e

        results = []
        for item in (data.get("webPages") or {}).get("value", []):
            if not item.get("url"):
                continue
            results.append(
                SearchResult(
                    title=item.get("name", ""),
                    url=item["url"],
                    snippet=item.get("snippet", ""),
                    published_date=item.get("datePublished"),
                )
            )

        logger.info("bing_search_complete", query=query.query, results_count=len(results))
        return results

    async def close(self) -> None:
        await self._client.aclose()
