"""
Integration tests for Search Providers.

Exercises GoogleSearchClient, BingSearchClient and DuckDuckGoClient
against recorded-shape API payloads served by an httpx mock transport,
plus MockSearch, to ensure they correctly implement the SearchPort
interface.
"""

from datetime import date

import httpx
import pytest

from src.adapters.search.bing_client import BingSearchClient
from src.adapters.search.duckduckgo_client import DuckDuckGoClient
from src.adapters.search.google_client import GoogleSearchClient
from src.adapters.search.mock_search import MockSearch
from src.application.services.rate_limiter import RateLimiter
from src.application.services.search_aggregator import SearchAggregator
from src.domain.exceptions import ProviderError
from src.domain.models import SearchQuery, SearchResult


GOOGLE_PAYLOAD = {
    "items": [
        {
            "title": "GlideRecord | ServiceNow Developers",
            "link": "https://developer.servicenow.com/dev.do#!/reference/api/glide-record",
            "snippet": "The GlideRecord API is used for database operations.",
            "pagemap": {"metatags": [{"article:published_time": "2024-01-15"}]},
        },
        {
            "title": "Missing link is skipped",
            "snippet": "no url",
        },
        {
            "title": "GlideRecord tips",
            "link": "https://blog.example.com/gliderecord",
        },
    ]
}

BING_PAYLOAD = {
    "webPages": {
        "value": [
            {
                "name": "Client scripts",
                "url": "https://docs.servicenow.com/client-scripts.html",
                "snippet": "Client scripts run JavaScript on the client.",
                "datePublished": "2023-11-02T00:00:00.0000000",
            }
        ]
    }
}

DUCKDUCKGO_PAYLOAD = {
    "Answer": "",
    "AbstractURL": "",
    "RelatedTopics": [
        {"FirstURL": "https://duckduckgo.com/Python_(language)", "Text": "Python - A programming language"},
        {"Text": "entry without a url"},
        {
            "Name": "Software",
            "Topics": [
                {"FirstURL": "https://duckduckgo.com/CPython", "Text": "CPython - Reference implementation"},
                {"FirstURL": "https://duckduckgo.com/PyPy", "Text": "PyPy - JIT implementation"},
            ],
        },
    ],
}


class Recorder:
    """Mock transport handler that records requests."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


# =============================================================================
# Google Custom Search
# =============================================================================


class TestGoogleSearchClient:
    """Integration tests for GoogleSearchClient."""

    @pytest.mark.asyncio
    async def test_maps_items(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json=GOOGLE_PAYLOAD))
        client = GoogleSearchClient("key", "cx-id", client=http_client_factory(recorder))

        results = await client.search(SearchQuery(query="GlideRecord"))

        assert [r.title for r in results] == ["GlideRecord | ServiceNow Developers", "GlideRecord tips"]
        assert results[0].published_date == "2024-01-15"
        assert results[0].domain == "developer.servicenow.com"
        assert results[1].snippet == ""

    @pytest.mark.asyncio
    async def test_request_parameters(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json={}))
        client = GoogleSearchClient("key", "cx-id", client=http_client_factory(recorder))

        await client.search(
            SearchQuery(query="flow designer", max_results=25, domain="docs.servicenow.com", date_range="week", language="de")
        )

        params = recorder.requests[0].url.params
        assert params["key"] == "key"
        assert params["cx"] == "cx-id"
        assert params["q"] == "flow designer"
        assert params["num"] == "10"
        assert params["siteSearch"] == "docs.servicenow.com"
        assert params["dateRestrict"] == "w1"
        assert params["lr"] == "lang_de"

    @pytest.mark.asyncio
    async def test_error_status_raises_provider_error(self, http_client_factory):
        payload = {"error": {"code": 429, "message": "Quota exceeded"}}
        client = GoogleSearchClient(
            "key", "cx-id", client=http_client_factory(Recorder(httpx.Response(429, json=payload)))
        )

        with pytest.raises(ProviderError) as exc_info:
            await client.search(SearchQuery(query="q"))

        assert "Quota exceeded" in exc_info.value.message
        assert exc_info.value.details["provider"] == "google"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_provider_error(self, http_client_factory):
        client = GoogleSearchClient(
            "key", "cx-id", client=http_client_factory(Recorder(httpx.Response(200, text="<html>")))
        )

        with pytest.raises(ProviderError):
            await client.search(SearchQuery(query="q"))


# =============================================================================
# Bing Web Search
# =============================================================================


class TestBingSearchClient:
    """Integration tests for BingSearchClient."""

    @pytest.mark.asyncio
    async def test_maps_web_pages(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json=BING_PAYLOAD))
        client = BingSearchClient("secret", client=http_client_factory(recorder))

        results = await client.search(SearchQuery(query="client script"))

        assert len(results) == 1
        assert results[0].title == "Client scripts"
        assert results[0].domain == "docs.servicenow.com"
        assert results[0].published_date == "2023-11-02T00:00:00.0000000"
        assert recorder.requests[0].headers["Ocp-Apim-Subscription-Key"] == "secret"

    @pytest.mark.asyncio
    async def test_request_parameters(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json={}))
        client = BingSearchClient("secret", client=http_client_factory(recorder))

        results = await client.search(
            SearchQuery(query="ui policy", max_results=50, domain="docs.servicenow.com", date_range="day")
        )

        params = recorder.requests[0].url.params
        assert results == []
        assert params["q"] == "ui policy site:docs.servicenow.com"
        assert params["count"] == "50"
        assert params["setLang"] == "en"
        assert params["freshness"] == "Day"

    @pytest.mark.asyncio
    async def test_year_uses_explicit_range(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json={}))
        client = BingSearchClient(
            "secret",
            client=http_client_factory(recorder),
            today=lambda: date(2024, 6, 30),
        )

        await client.search(SearchQuery(query="cmdb", date_range="year"))

        assert recorder.requests[0].url.params["freshness"] == "2023-07-01..2024-06-30"

    @pytest.mark.asyncio
    async def test_unauthorized_raises_provider_error(self, http_client_factory):
        client = BingSearchClient("bad", client=http_client_factory(Recorder(httpx.Response(401))))

        with pytest.raises(ProviderError) as exc_info:
            await client.search(SearchQuery(query="q"))

        assert exc_info.value.details["status_code"] == 401


# =============================================================================
# DuckDuckGo Instant Answers
# =============================================================================


class TestDuckDuckGoClient:
    """Integration tests for DuckDuckGoClient."""

    @pytest.mark.asyncio
    async def test_flattens_related_topics(self, http_client_factory):
        client = DuckDuckGoClient(client=http_client_factory(Recorder(httpx.Response(200, json=DUCKDUCKGO_PAYLOAD))))

        results = await client.search(SearchQuery(query="python"))

        assert [r.title for r in results] == ["Python", "CPython", "PyPy"]
        assert results[1].snippet == "CPython - Reference implementation"

    @pytest.mark.asyncio
    async def test_instant_answer_first(self, http_client_factory):
        payload = {"Answer": "42", "AbstractURL": "https://example.com/answer", "RelatedTopics": []}
        client = DuckDuckGoClient(client=http_client_factory(Recorder(httpx.Response(200, json=payload))))

        results = await client.search(SearchQuery(query="answer"))

        assert len(results) == 1
        assert results[0].title == "DuckDuckGo Instant Answer"
        assert results[0].url == "https://example.com/answer"
        assert results[0].snippet == "42"

    @pytest.mark.asyncio
    async def test_related_topics_are_capped(self, http_client_factory):
        client = DuckDuckGoClient(
            max_topics=5,
            client=http_client_factory(Recorder(httpx.Response(200, json=DUCKDUCKGO_PAYLOAD))),
        )

        results = await client.search(SearchQuery(query="python", max_results=2))

        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_site_filter_in_query(self, http_client_factory):
        recorder = Recorder(httpx.Response(200, json={}))
        client = DuckDuckGoClient(client=http_client_factory(recorder))

        await client.search(SearchQuery(query="asyncio", domain="docs.python.org"))

        params = recorder.requests[0].url.params
        assert params["q"] == "asyncio site:docs.python.org"
        assert params["format"] == "json"

    @pytest.mark.asyncio
    async def test_failure_returns_empty_list(self, http_client_factory):
        client = DuckDuckGoClient(client=http_client_factory(Recorder(httpx.Response(503))))

        assert await client.search(SearchQuery(query="q")) == []


# =============================================================================
# MockSearch and failover across real adapters
# =============================================================================


class TestMockSearch:
    """Integration tests for the MockSearch provider."""

    @pytest.mark.asyncio
    async def test_search_returns_results(self, mock_search):
        results = await mock_search.search(SearchQuery(query="python tutorial", max_results=1))

        assert len(results) == 1
        assert all(isinstance(r, SearchResult) for r in results)

    @pytest.mark.asyncio
    async def test_search_unknown_topic(self, mock_search):
        results = await mock_search.search(SearchQuery(query="UNKNOWN_TOPIC_XYZ"))

        assert len(results) > 0
        assert mock_search.get_queries() == ["UNKNOWN_TOPIC_XYZ"]


class TestProviderFailover:
    """Aggregator failover across HTTP-backed adapters."""

    @pytest.mark.asyncio
    async def test_google_failure_falls_back_to_duckduckgo(self, http_client_factory):
        google = GoogleSearchClient(
            "key", "cx-id", client=http_client_factory(Recorder(httpx.Response(500, text="boom")))
        )
        ddg = DuckDuckGoClient(client=http_client_factory(Recorder(httpx.Response(200, json=DUCKDUCKGO_PAYLOAD))))
        aggregator = SearchAggregator([google, ddg], RateLimiter(max_requests=10))

        response = await aggregator.search(SearchQuery(query="python"))

        assert response.total_results == 3
        assert aggregator.cursor == 1
        await aggregator.close()
