"""
Mock Search Provider - Canned search results for testing.

Provides pre-defined search results keyed by topic, optional injected
failures for failover scenarios, and call tracking. Selectable at
runtime with ``search.provider: mock``.
"""

import asyncio
from typing import Dict, List, Optional

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.exceptions import ProviderError
from src.domain.models import SearchQuery, SearchResult

logger = get_logger(__name__)


# Pre-defined mock search results keyed by a lowercase topic term
MOCK_SEARCH_RESULTS: Dict[str, List[Dict[str, str]]] = {
    "business rule": [
        {
            "title": "Business rules - Community discussion",
            "snippet": "How do I abort an insert from a before business rule? Use current.setAbortAction(true).",
            "url": "https://www.reddit.com/r/servicenow/comments/business-rules",
        },
        {
            "title": "Business rules | ServiceNow Docs",
            "snippet": "A business rule is a server-side script that runs when a record is displayed, inserted, updated, or deleted.",
            "url": "https://docs.servicenow.com/bundle/script/business-rules.html",
        },
        {
            "title": "Business Rules Technical Best Practices",
            "snippet": "Use conditions in business rules, keep code in script includes, and avoid current.update() in before rules.",
            "url": "https://developer.servicenow.com/dev.do#!/guides/business-rules",
        },
    ],
    "python": [
        {
            "title": "Welcome to Python.org",
            "snippet": "The official home of the Python Programming Language.",
            "url": "https://www.python.org/",
        },
        {
            "title": "Python (programming language) - Wikipedia",
            "snippet": "Python is a high-level, general-purpose programming language.",
            "url": "https://en.wikipedia.org/wiki/Python_(programming_language)",
        },
    ],
}

# Default results for unknown queries
DEFAULT_SEARCH_RESULTS = [
    {
        "title": "Search results overview",
        "snippet": "General reference material matching the query.",
        "url": "https://en.wikipedia.org/wiki/Web_search_engine",
    },
    {
        "title": "Developer documentation portal",
        "snippet": "Guides, API references and tutorials.",
        "url": "https://developer.mozilla.org/en-US/docs/Web",
    },
]


class MockSearch(SearchPort):
    """
    Mock search provider with realistic pre-defined results.

    Provides consistent search results for testing without requiring
    external API calls. Passing ``error`` makes every call raise it,
    which drives aggregator failover tests.
    """

    def __init__(
        self,
        name: str = "mock",
        latency_ms: int = 0,
        error: Optional[Exception] = None,
        results: Optional[List[Dict[str, str]]] = None,
    ):
        """
        Initialize the mock search provider.

        Args:
            name: Provider name (rate-limit key)
            latency_ms: Simulated latency in milliseconds
            error: Exception raised on every call, if set
            results: Fixed results returned for every query, if set
        """
        self.name = name
        self._latency_ms = latency_ms
        self._error = error
        self._fixed_results = results
        self._call_count = 0
        self._queries: List[str] = []

    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """
        Execute a mock web search.

        Args:
            query: Validated search query

        Returns:
            List of SearchResult objects
        """
        self._call_count += 1
        self._queries.append(query.query)

        logger.debug(
            "mock_search_execute",
            provider=self.name,
            query=query.query,
            call_count=self._call_count,
        )

        if self._latency_ms > 0:
            await asyncio.sleep(self._latency_ms / 1000)

        if self._error is not None:
            if isinstance(self._error, ProviderError):
                raise self._error
            raise ProviderError(str(self._error), provider=self.name) from self._error

        results_data = self._fixed_results
        if results_data is None:
            query_lower = query.query.lower()
            results_data = next(
                (data for topic, data in MOCK_SEARCH_RESULTS.items() if topic in query_lower),
                DEFAULT_SEARCH_RESULTS,
            )

        return [
            SearchResult(
                title=r["title"],
                snippet=r["snippet"],
                url=r["url"],
            )
            for r in results_data[:query.max_results]
        ]

    def get_call_count(self) -> int:
        """Get the number of calls made."""
        return self._call_count

    def get_queries(self) -> List[str]:
        """Get all queries made."""
        return self._queries.copy()

    def reset(self) -> None:
        """Reset the mock state."""
        self._call_count = 0
        self._queries.clear()
