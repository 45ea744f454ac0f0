"""
Pytest configuration and shared fixtures.
"""

from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from src.adapters.api.dependencies import reset_dependencies
from src.adapters.search.mock_search import MockSearch
from src.application.services.content_extractor import ContentExtractor
from src.application.services.fetch_service import FetchService
from src.application.services.rate_limiter import RateLimiter
from src.application.services.search_aggregator import SearchAggregator
from src.tools.orchestrator import ToolOrchestrator
from src.tools.web_fetch import WebFetchTool
from src.tools.web_search import WebSearchTool


SAMPLE_HTML = """
<html>
  <head>
    <title>Glide API reference</title>
    <meta name="author" content="Ada Lovelace">
    <meta property="article:published_time" content="2024-03-01T10:00:00Z">
    <meta name="keywords" content="glide, scripting, api">
  </head>
  <body>
    <header><h1>Site Header Banner</h1></header>
    <div class="breadcrumb"><a href="/">Home</a> <a href="/api">API</a> <a href="/api/foo">Foo</a></div>
    <main>
      <h1>GlideRecord</h1>
      <p>GlideRecord is used for database operations. It lets server scripts query,
      insert, update and delete records in any table without writing SQL.</p>
      <script>var tracking = "should never appear";</script>
      <div class="ads">Buy now and save</div>
    </main>
    <div class="tags"><a href="/t/server">server</a><a href="/t/api">api</a></div>
    <footer>Copyright footer text</footer>
  </body>
</html>
"""


class FakeClock:
    """Manually advanced monotonic clock for rate-limit tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset dependency singletons before each test."""
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def fake_clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def mock_search():
    """Provide a mock search provider."""
    return MockSearch()


@pytest.fixture
def search_rate_limiter(fake_clock):
    """Provide a per-provider search limiter."""
    return RateLimiter(max_requests=10, clock=fake_clock, name="search")


@pytest.fixture
def fetch_rate_limiter(fake_clock):
    """Provide a per-domain fetch limiter."""
    return RateLimiter(max_requests=5, clock=fake_clock, name="fetch")


@pytest.fixture
def aggregator(mock_search, search_rate_limiter):
    """Provide an aggregator over the mock provider."""
    return SearchAggregator(
        providers=[mock_search],
        rate_limiter=search_rate_limiter,
        official_domains=["docs.servicenow.com", "developer.servicenow.com"],
    )


@pytest.fixture
def extractor():
    """Provide a content extractor with documentation/forum hosts."""
    return ContentExtractor(
        documentation_hosts=["docs.servicenow.com", "developer.servicenow.com"],
        forum_hosts=["community.servicenow.com"],
    )


@pytest.fixture
def html_handler():
    """Handler serving SAMPLE_HTML for every request."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            html=SAMPLE_HTML,
            headers={"Last-Modified": "Fri, 01 Mar 2024 10:00:00 GMT"},
        )
    return handler


@pytest.fixture
def fetch_service(fetch_rate_limiter, extractor, html_handler):
    """Provide a fetch service backed by a mock transport."""
    return FetchService(
        rate_limiter=fetch_rate_limiter,
        extractor=extractor,
        client=mock_http_client(html_handler),
    )


@pytest.fixture
def search_tool(aggregator):
    """Provide the search tool with vertical enhancement enabled."""
    return WebSearchTool(
        aggregator=aggregator,
        vertical_keywords=["servicenow", "business rule", "glide"],
        vertical_qualifier="ServiceNow",
    )


@pytest.fixture
def fetch_tool(fetch_service):
    """Provide the fetch tool."""
    return WebFetchTool(fetch_service=fetch_service)


@pytest.fixture
def orchestrator(search_tool, fetch_tool):
    """Provide a tool orchestrator wired to mock dependencies."""
    return ToolOrchestrator(search_tool=search_tool, fetch_tool=fetch_tool)


@pytest.fixture
def test_client(orchestrator, aggregator):
    """Provide a FastAPI test client with mock dependencies."""
    from main import app
    from src.adapters.api.dependencies import get_orchestrator, get_search_aggregator

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_search_aggregator] = lambda: aggregator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_html():
    """Provide a representative documentation page."""
    return SAMPLE_HTML


@pytest.fixture
def http_client_factory():
    """Provide a factory for mock-transport HTTP clients."""
    return mock_http_client
