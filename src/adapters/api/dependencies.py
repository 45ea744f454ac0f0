"""
Dependency Injection for FastAPI.

This module builds the search providers, rate limiters, services and
tools from configuration and hands out process-wide singletons, allowing
easy swapping between mock and live providers.
"""

import threading
from typing import List, Optional

from src.adapters.search.bing_client import BingSearchClient
from src.adapters.search.duckduckgo_client import DuckDuckGoClient
from src.adapters.search.google_client import GoogleSearchClient
from src.adapters.search.mock_search import MockSearch
from src.application.ports.search_port import SearchPort
from src.application.services.content_extractor import ContentExtractor
from src.application.services.fetch_service import FetchService
from src.application.services.rate_limiter import RateLimiter
from src.application.services.search_aggregator import SearchAggregator
from src.config.logging import get_logger
from src.config.settings import get_settings
from src.tools.orchestrator import ToolOrchestrator
from src.tools.web_fetch import WebFetchTool
from src.tools.web_search import WebSearchTool

logger = get_logger(__name__)

# Thread-safe singleton management (RLock allows same thread to re-acquire)
_lock = threading.RLock()
_search_providers: Optional[List[SearchPort]] = None
_search_rate_limiter: Optional[RateLimiter] = None
_fetch_rate_limiter: Optional[RateLimiter] = None
_search_aggregator: Optional[SearchAggregator] = None
_content_extractor: Optional[ContentExtractor] = None
_fetch_service: Optional[FetchService] = None
_orchestrator: Optional[ToolOrchestrator] = None


def get_search_providers() -> List[SearchPort]:
    """Build the provider rotation from configuration (thread-safe)."""
    global _search_providers

    if _search_providers is not None:
        return _search_providers

    with _lock:
        if _search_providers is not None:
            return _search_providers

        settings = get_settings()
        search = settings.search

        if search.provider == "mock":
            _search_providers = [MockSearch()]
        elif search.provider == "live":
            providers: List[SearchPort] = []
            if search.google_api_key and search.google_cx:
                providers.append(
                    GoogleSearchClient(
                        api_key=search.google_api_key,
                        search_engine_id=search.google_cx,
                        base_url=search.google_base_url,
                        timeout=search.timeout,
                        user_agent=settings.app.user_agent,
                    )
                )
            if search.bing_api_key:
                providers.append(
                    BingSearchClient(
                        api_key=search.bing_api_key,
                        base_url=search.bing_base_url,
                        timeout=search.timeout,
                        user_agent=settings.app.user_agent,
                    )
                )
            # Keyless fallback is always last in rotation
            providers.append(
                DuckDuckGoClient(
                    base_url=search.duckduckgo_base_url,
                    max_topics=search.max_related_topics,
                    user_agent=settings.app.user_agent,
                )
            )
            _search_providers = providers
        else:
            raise ValueError(f"Unknown search provider: {search.provider}")

        logger.info(
            "search_providers_configured",
            providers=[p.name for p in _search_providers],
        )
        return _search_providers


def get_search_rate_limiter() -> RateLimiter:
    """Get the per-provider search limiter (thread-safe)."""
    global _search_rate_limiter

    if _search_rate_limiter is not None:
        return _search_rate_limiter

    with _lock:
        if _search_rate_limiter is not None:
            return _search_rate_limiter

        settings = get_settings()
        _search_rate_limiter = RateLimiter(
            max_requests=settings.search.max_requests_per_minute,
            name="search",
        )
        return _search_rate_limiter


def get_fetch_rate_limiter() -> RateLimiter:
    """Get the per-domain fetch limiter (thread-safe)."""
    global _fetch_rate_limiter

    if _fetch_rate_limiter is not None:
        return _fetch_rate_limiter

    with _lock:
        if _fetch_rate_limiter is not None:
            return _fetch_rate_limiter

        settings = get_settings()
        _fetch_rate_limiter = RateLimiter(
            max_requests=settings.fetch.max_requests_per_domain_per_minute,
            name="fetch",
        )
        return _fetch_rate_limiter


def get_search_aggregator() -> SearchAggregator:
    """Get the provider aggregator (thread-safe)."""
    global _search_aggregator

    if _search_aggregator is not None:
        return _search_aggregator

    with _lock:
        if _search_aggregator is not None:
            return _search_aggregator

        settings = get_settings()
        _search_aggregator = SearchAggregator(
            providers=get_search_providers(),
            rate_limiter=get_search_rate_limiter(),
            official_domains=settings.search.official_domains,
        )
        return _search_aggregator


def get_content_extractor() -> ContentExtractor:
    """Get the HTML content extractor (thread-safe)."""
    global _content_extractor

    if _content_extractor is not None:
        return _content_extractor

    with _lock:
        if _content_extractor is not None:
            return _content_extractor

        settings = get_settings()
        _content_extractor = ContentExtractor(
            documentation_hosts=settings.fetch.documentation_hosts,
            forum_hosts=settings.fetch.forum_hosts,
        )
        return _content_extractor


def get_fetch_service() -> FetchService:
    """Get the page fetch service (thread-safe)."""
    global _fetch_service

    if _fetch_service is not None:
        return _fetch_service

    with _lock:
        if _fetch_service is not None:
            return _fetch_service

        settings = get_settings()
        _fetch_service = FetchService(
            rate_limiter=get_fetch_rate_limiter(),
            extractor=get_content_extractor(),
            blocked_host_patterns=settings.fetch.blocked_host_patterns,
            user_agent=settings.app.user_agent,
            max_redirects=settings.fetch.max_redirects,
        )
        return _fetch_service


def get_orchestrator() -> ToolOrchestrator:
    """Get the tool orchestrator with all dependencies (thread-safe)."""
    global _orchestrator

    if _orchestrator is not None:
        return _orchestrator

    with _lock:
        if _orchestrator is not None:
            return _orchestrator

        settings = get_settings()

        search_tool = WebSearchTool(
            aggregator=get_search_aggregator(),
            vertical_keywords=settings.search.vertical_keywords,
            vertical_qualifier=settings.search.vertical_qualifier,
            problem_terms=settings.search.problem_terms,
            default_max_results=settings.search.default_max_results,
        )
        fetch_tool = WebFetchTool(
            fetch_service=get_fetch_service(),
            default_max_content_length=settings.fetch.max_content_length,
            default_timeout_ms=settings.fetch.timeout_ms,
        )

        _orchestrator = ToolOrchestrator(search_tool=search_tool, fetch_tool=fetch_tool)
        return _orchestrator


async def close_dependencies() -> None:
    """Close HTTP clients held by providers and services (call on shutdown)."""
    with _lock:
        aggregator = _search_aggregator
        providers = _search_providers
        fetch_service = _fetch_service

    if aggregator is not None:
        await aggregator.close()
    elif providers is not None:
        for provider in providers:
            await provider.close()

    if fetch_service is not None:
        await fetch_service.close()


def reset_dependencies() -> None:
    """Reset all singleton instances."""
    global _search_providers, _search_rate_limiter, _fetch_rate_limiter
    global _search_aggregator, _content_extractor, _fetch_service, _orchestrator

    with _lock:
        _search_providers = None
        _search_rate_limiter = None
        _fetch_rate_limiter = None
        _search_aggregator = None
        _content_extractor = None
        _fetch_service = None
        _orchestrator = None
