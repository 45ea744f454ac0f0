"""
DuckDuckGo Search Client - Free web search with no API key required.

This module implements the Search port using the DuckDuckGo Instant
Answer API. It is always present in the rotation as the last resort,
so it never raises: any failure degrades to an empty result list.
"""

from typing import Any, Dict, Iterator, List, Optional

import httpx

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.models import SearchQuery, SearchResult


logger = get_logger(__name__)


class DuckDuckGoClient(SearchPort):
    """
    DuckDuckGo Instant Answer client for keyless searches.

    The Instant Answer API returns an answer field and a list of related
    topics rather than a ranked web index, so only a handful of results
    are synthesized per query.
    """

    name = "duckduckgo"

    def __init__(
        self,
        base_url: str = "https://api.duckduckgo.com/",
        timeout: int = 5,
        max_topics: int = 5,
        user_agent: str = "WebIntel-Bot/1.0",
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the DuckDuckGo client.

        Args:
            base_url: Instant Answer API endpoint
            timeout: Request timeout in seconds
            max_topics: Upper bound on related-topic results
            user_agent: User-Agent header sent with every request
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self._base_url = base_url
        self._max_topics = max_topics
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """
        Execute a search against the Instant Answer API.

        Args:
            query: Validated search query

        Returns:
            List of SearchResult objects (empty on any failure)
        """
        text = f"{query.query} site:{query.domain}" if query.domain else query.query
        if query.date_range:
            logger.debug("duckduckgo_date_range_unsupported", date_range=query.date_range)

        try:
            response = await self._client.get(
                self._base_url,
                params={
                    "q": text,
                    "format": "json",
                    "no_html": "1",
                    "skip_disambig": "1",
                },
            )
            response.raise_for_status()
            data = response.json()
            results = self._map_results(data, limit=min(query.max_results, self._max_topics))
        except Exception as e:
            logger.warning(
                "duckduckgo_search_error",
                query=text,
                error=str(e),
            )
            # Return empty list on error instead of raising
            return []

        logger.info(
            "duckduckgo_search_complete",
            query=text,
            results_count=len(results),
        )
        return results

    def _map_results(self, data: Dict[str, Any], limit: int) -> List[SearchResult]:
        results = []

        if data.get("Answer"):
            results.append(
                SearchResult(
                    title="DuckDuckGo Instant Answer",
                    url=data.get("AbstractURL") or "https://duckduckgo.com",
                    snippet=str(data["Answer"]),
                )
            )

        topics_added = 0
        for topic in self._iter_topics(data.get("RelatedTopics") or []):
            if topics_added >= limit:
                break
            first_url = topic.get("FirstURL")
            text = topic.get("Text")
            if not first_url or not text:
                continue
            topics_added += 1
            results.append(
                SearchResult(
                    title=text.split(" - ")[0] or "Related Topic",
                    url=first_url,
                    snippet=text,
                )
            )

        return results

    @staticmethod
    def _iter_topics(topics: List[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
        """Flatten grouped topics ({"Name": ..., "Topics": [...]}) into single entries."""
        for topic in topics:
            if isinstance(topic.get("Topics"), list):
                yield from topic["Topics"]
            else:
                yield topic

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
