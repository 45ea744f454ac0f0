"""
Search Port - Abstract interface for web search providers.

This module defines the contract each search backend implements so the
aggregator can rotate between them without knowing their wire formats.
"""

from abc import ABC, abstractmethod
from typing import List

from src.domain.models import SearchQuery, SearchResult


class SearchPort(ABC):
    """
    Abstract base class for web search providers.

    Implementations should handle:
    - Translating a SearchQuery into the backend's request format
    - Mapping the backend payload into SearchResult records
    - Raising ProviderError on network or parse failure
    """

    # Unique provider name, also used as the rate-limit key
    name: str

    @abstractmethod
    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """
        Execute a web search and return results.

        Args:
            query: Validated search query

        Returns:
            List of SearchResult objects in provider ranking order
        """
        pass

    async def close(self) -> None:
        """Release any network resources held by the provider."""
        return None
