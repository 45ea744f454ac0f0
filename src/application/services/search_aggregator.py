"""
Search Aggregator - Failover across configured search providers.

Providers are tried in round-robin order starting at a shared rotation
cursor. A rate-limited provider is skipped without counting as a
failure; a failing provider is skipped and remembered as the last error.
After a success the cursor stays on the provider that answered, so the
next call starts there.
"""

import threading
import time
from typing import Iterable, List, Optional, Sequence

from src.application.ports.search_port import SearchPort
from src.application.services.rate_limiter import RateLimiter
from src.config.logging import get_logger
from src.domain.exceptions import AllProvidersExhaustedError, NoProvidersAvailableError
from src.domain.models import SearchQuery, SearchResponse, SearchResult

logger = get_logger(__name__)


class SearchAggregator:
    """
    Owns an ordered provider list, a rotation cursor and the search
    rate limiter.
    """

    def __init__(
        self,
        providers: Sequence[SearchPort],
        rate_limiter: RateLimiter,
        official_domains: Iterable[str] = (),
    ):
        """
        Initialize the aggregator.

        Args:
            providers: Providers in rotation order
            rate_limiter: Limiter keyed by provider name
            official_domains: Domains whose results are ranked first
        """
        self._providers: List[SearchPort] = list(providers)
        self._rate_limiter = rate_limiter
        self._official_domains = tuple(d.lower() for d in official_domains)
        self._cursor = 0
        self._cursor_lock = threading.Lock()

    @property
    def cursor(self) -> int:
        """Index of the provider the next search starts with."""
        with self._cursor_lock:
            return self._cursor

    @property
    def provider_names(self) -> List[str]:
        return [p.name for p in self._providers]

    def _current(self) -> int:
        with self._cursor_lock:
            return self._cursor

    def _advance_from(self, index: int) -> None:
        # Only advance if no concurrent call has moved the cursor already;
        # a double advance would skip a provider nobody has tried.
        with self._cursor_lock:
            if self._cursor == index:
                self._cursor = (index + 1) % len(self._providers)

    def _settle_on(self, index: int) -> None:
        with self._cursor_lock:
            self._cursor = index

    async def search(self, query: SearchQuery) -> SearchResponse:
        """
        Search with failover.

        Args:
            query: Validated search query

        Returns:
            SearchResponse from the first provider that succeeds

        Raises:
            NoProvidersAvailableError: No providers are configured
            AllProvidersExhaustedError: Every provider failed or was rate limited
        """
        if not self._providers:
            raise NoProvidersAvailableError()

        start_time = time.perf_counter()
        last_error: Optional[Exception] = None
        rate_limited: List[str] = []

        for _ in range(len(self._providers)):
            index = self._current()
            provider = self._providers[index]

            if not self._rate_limiter.allow(provider.name):
                logger.warning(
                    "search_provider_rate_limited",
                    provider=provider.name,
                    limit=self._rate_limiter.max_requests,
                )
                rate_limited.append(provider.name)
                self._advance_from(index)
                continue

            try:
                results = await provider.search(query)
            except Exception as e:
                last_error = e
                logger.warning(
                    "search_provider_failed",
                    provider=provider.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._advance_from(index)
                continue

            self._settle_on(index)
            ranked = self.prioritize_official(results)
            search_time = int((time.perf_counter() - start_time) * 1000)

            logger.info(
                "search_complete",
                query=query.query,
                provider=provider.name,
                results_count=len(ranked),
                search_time_ms=search_time,
            )

            return SearchResponse(
                results=ranked,
                query=query.query,
                search_time=search_time,
            )

        logger.error(
            "search_providers_exhausted",
            query=query.query,
            last_error=str(last_error) if last_error is not None else None,
            rate_limited=rate_limited,
        )
        raise AllProvidersExhaustedError(last_error, rate_limited=rate_limited) from last_error

    def is_official(self, result: SearchResult) -> bool:
        url = result.url.lower()
        return any(domain in url for domain in self._official_domains)

    def prioritize_official(self, results: Sequence[SearchResult]) -> List[SearchResult]:
        """Stable-sort results on official domains to the front."""
        return sorted(results, key=lambda r: not self.is_official(r))

    async def close(self) -> None:
        """Close every provider's network resources."""
        for provider in self._providers:
            await provider.close()
