"""Search adapters package."""

from src.adapters.search.bing_client import BingSearchClient
from src.adapters.search.duckduckgo_client import DuckDuckGoClient
from src.adapters.search.google_client import GoogleSearchClient
from src.adapters.search.mock_search import MockSearch

__all__ = ["BingSearchClient", "DuckDuckGoClient", "GoogleSearchClient", "MockSearch"]
