"""
Fetch Service - Retrieves a page and hands it to the content extractor.

URL policy (protocol and host blocklist) is enforced before any network
I/O, and again on every redirect target before it is requested. Every
other failure (rate limit, timeout, size cap, non-2xx status, transport
error) surfaces as a single FetchFailureError chained to its original
cause; a partial WebContent is never returned.
"""

import asyncio
import codecs
import ipaddress
import re
from typing import Optional, Sequence, Tuple
from urllib.parse import ParseResult, urlparse

import httpx

from src.application.services.content_extractor import ContentExtractor
from src.application.services.rate_limiter import RateLimiter
from src.config.logging import get_logger
from src.domain.exceptions import BlockedURLError, FetchFailureError, RateLimitedError
from src.domain.models import FetchRequest, WebContent

logger = get_logger(__name__)


ALLOWED_SCHEMES = ("http", "https")
DEFAULT_BLOCKED_HOST_PATTERNS: Tuple[str, ...] = (
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "internal",
    "private",
)
ACCEPT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
NUMERIC_LABEL = re.compile(r"^(0x[0-9a-f]*|\d+)$")


def _host_is_blocked(host: str, patterns: Sequence[str]) -> bool:
    labels = host.split(".")
    return any(
        host == pattern or pattern in labels or host.endswith("." + pattern)
        for pattern in patterns
    )


def _is_numeric_host(host: str) -> bool:
    # 2130706433, 0x7f000001 and 0177.0.0.1 all resolve to IPv4 addresses
    return all(NUMERIC_LABEL.match(label) for label in host.split("."))


def _is_non_public_address(host: str) -> bool:
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return _is_numeric_host(host)
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
    )


def _decode(body: bytes, encoding: Optional[str]) -> str:
    try:
        codecs.lookup(encoding or "utf-8")
    except LookupError:
        encoding = None
    return body.decode(encoding or "utf-8", errors="replace")


class FetchService:
    """
    Fetches pages over HTTP with per-domain rate limiting.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        extractor: ContentExtractor,
        blocked_host_patterns: Sequence[str] = DEFAULT_BLOCKED_HOST_PATTERNS,
        user_agent: str = "WebIntel-Bot/1.0",
        max_redirects: int = 5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the fetch service.

        Args:
            rate_limiter: Limiter keyed by target domain
            extractor: HTML to WebContent transform
            blocked_host_patterns: Hostnames/labels that may never be fetched
            user_agent: User-Agent header sent with every request
            max_redirects: Redirect hop limit when redirects are followed
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self._rate_limiter = rate_limiter
        self._extractor = extractor
        self._blocked_host_patterns = tuple(p.lower() for p in blocked_host_patterns)
        self._max_redirects = max_redirects
        # Redirects are followed hop by hop in _download so each target is checked
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent, **ACCEPT_HEADERS},
            follow_redirects=False,
        )

    # =========================================================================
    # URL Policy
    # =========================================================================

    def validate_url(self, url: str) -> ParseResult:
        """
        Check that a URL may be fetched.

        Raises:
            BlockedURLError: Malformed URL, disallowed protocol, or blocked host
        """
        try:
            parsed = urlparse(url)
            host = (parsed.hostname or "").lower()
        except ValueError as e:
            raise BlockedURLError(url, "malformed URL") from e

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            raise BlockedURLError(url, f"protocol '{parsed.scheme}' is not allowed")
        if not host:
            raise BlockedURLError(url, "missing hostname")
        if _host_is_blocked(host, self._blocked_host_patterns):
            raise BlockedURLError(url, f"host '{host}' is blocked")
        if _is_non_public_address(host):
            raise BlockedURLError(url, f"address '{host}' is not public")

        return parsed

    def is_url_fetchable(self, url: str) -> bool:
        """Non-raising variant of :meth:`validate_url`."""
        try:
            self.validate_url(url)
        except BlockedURLError:
            return False
        return True

    # =========================================================================
    # Fetch
    # =========================================================================

    async def fetch(self, request: FetchRequest) -> WebContent:
        """
        Fetch a page and extract its content.

        Args:
            request: Validated fetch request

        Returns:
            Extracted WebContent

        Raises:
            BlockedURLError: URL or redirect target rejected by the URL policy
            FetchFailureError: Rate limit, timeout, size cap, status or transport failure
        """
        url = request.url
        self._admit(url)

        logger.info("fetch_start", url=url, follow_redirects=request.follow_redirects)

        try:
            html, last_modified = await asyncio.wait_for(
                self._download(request),
                timeout=request.timeout / 1000,
            )
        except asyncio.TimeoutError as e:
            logger.error("fetch_timeout", url=url, timeout_ms=request.timeout)
            raise FetchFailureError(url, f"request timed out after {request.timeout}ms") from e
        except httpx.TimeoutException as e:
            logger.error("fetch_timeout", url=url, timeout_ms=request.timeout)
            raise FetchFailureError(url, f"request timed out after {request.timeout}ms") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("fetch_http_error", url=url, error=str(e))
            raise FetchFailureError(url, f"HTTP error: {e}") from e

        content = self._extractor.extract(
            html,
            url,
            clean_content=request.clean_content,
            last_modified=last_modified,
        )

        logger.info(
            "fetch_complete",
            url=url,
            word_count=content.metadata.word_count,
            reading_time=content.metadata.reading_time,
            content_type=content.content_type,
        )
        return content

    def _admit(self, url: str) -> None:
        """Apply the URL policy and the per-domain limit to one outgoing request."""
        domain = self.validate_url(url).hostname or ""

        if not self._rate_limiter.allow(domain):
            cause = RateLimitedError(domain, self._rate_limiter.max_requests)
            logger.warning("fetch_rate_limited", url=url, domain=domain)
            raise FetchFailureError(url, cause.message) from cause

    async def _download(self, request: FetchRequest) -> Tuple[str, Optional[str]]:
        """Request the page, following redirects one hop at a time."""
        url = request.url
        timeout = httpx.Timeout(request.timeout / 1000)

        for _ in range(self._max_redirects + 1):
            async with self._client.stream(
                "GET",
                url,
                timeout=timeout,
                follow_redirects=False,
            ) as response:
                if not (request.follow_redirects and response.is_redirect):
                    return await self._read_body(request, response)
                location = str(response.url.join(response.headers["location"]))

            logger.info("fetch_redirect", url=url, location=location)
            self._admit(location)
            url = location

        raise FetchFailureError(
            request.url,
            f"too many redirects (limit {self._max_redirects})",
        )

    async def _read_body(
        self,
        request: FetchRequest,
        response: httpx.Response,
    ) -> Tuple[str, Optional[str]]:
        """Read the streamed body, enforcing status and the byte cap."""
        url = request.url
        limit = request.max_content_length

        if not response.is_success:
            raise FetchFailureError(
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            raise FetchFailureError(url, f"content length {declared} exceeds limit of {limit} bytes")

        chunks = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > limit:
                raise FetchFailureError(url, f"content exceeds limit of {limit} bytes")
            chunks.append(chunk)

        return (
            _decode(b"".join(chunks), response.charset_encoding),
            response.headers.get("last-modified"),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
