"""
Unit tests for domain models and exceptions.
"""

import pytest
from pydantic import ValidationError

from src.domain.exceptions import (
    AllProvidersExhaustedError,
    FetchFailureError,
    InvalidArgumentError,
    ProviderError,
)
from src.domain.models import (
    ContentPart,
    FetchRequest,
    SearchQuery,
    SearchResponse,
    SearchResult,
    ToolCall,
    ToolResult,
    extract_domain,
)


class TestSearchModels:
    """Tests for search query/result models."""

    def test_query_defaults(self):
        query = SearchQuery(query="glide")

        assert query.max_results == 10
        assert query.language == "en"

    @pytest.mark.parametrize("max_results", [0, 51])
    def test_query_max_results_bounds(self, max_results):
        with pytest.raises(ValidationError):
            SearchQuery(query="glide", max_results=max_results)

    def test_query_rejects_empty_text(self):
        with pytest.raises(ValidationError):
            SearchQuery(query="")

    def test_query_accepts_camel_case(self):
        query = SearchQuery.model_validate({"query": "q", "maxResults": 5, "dateRange": "week"})

        assert query.max_results == 5
        assert query.date_range == "week"

    def test_result_domain_is_derived_from_url(self):
        result = SearchResult(title="t", url="https://Docs.Python.org/3/", domain="spoofed.example")

        assert result.domain == "docs.python.org"

    def test_result_without_host(self):
        assert SearchResult(title="t", url="not a url").domain == ""

    def test_response_total_results_serialized(self):
        response = SearchResponse(
            results=[SearchResult(title="t", url="https://example.com/")],
            query="q",
            search_time=12,
        )

        data = response.model_dump(mode="json", by_alias=True)

        assert data["totalResults"] == 1
        assert data["searchTime"] == 12
        assert data["results"][0]["publishedDate"] is None

    def test_extract_domain(self):
        assert extract_domain("https://community.servicenow.com/thread/1") == "community.servicenow.com"
        assert extract_domain(None) == ""


class TestFetchModels:
    """Tests for FetchRequest."""

    def test_service_level_defaults(self):
        request = FetchRequest(url="https://example.com/")

        assert request.max_content_length == 50_000
        assert request.timeout == 10_000
        assert request.follow_redirects is False
        assert request.clean_content is True

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValidationError):
            FetchRequest(url="https://example.com/", timeout=0)


class TestToolContract:
    """Tests for the tool call/result envelope."""

    def test_content_part_wire_format(self):
        assert ContentPart.of_json({"a": 1}).model_dump(by_alias=True, exclude_none=True) == {
            "type": "json",
            "json": {"a": 1},
        }
        assert ContentPart.of_text("hi").model_dump(by_alias=True, exclude_none=True) == {
            "type": "text",
            "text": "hi",
        }

    def test_tool_result_wire_format(self):
        result = ToolResult(tool_call_id="c1", result={"ok": True}, is_error=False)

        data = result.model_dump(by_alias=True)

        assert data["toolCallId"] == "c1"
        assert data["isError"] is False

    def test_tool_call_from_json(self):
        call = ToolCall.model_validate({"id": "c1", "name": "search", "arguments": {"query": "q"}})

        assert call.arguments == {"query": "q"}


class TestExceptions:
    """Tests for exception payloads."""

    def test_invalid_argument_to_dict(self):
        error = InvalidArgumentError("Missing required argument: url", field="url")

        assert error.to_dict() == {
            "error": "Missing required argument: url",
            "code": "INVALID_ARGUMENT",
            "details": {"field": "url"},
        }

    def test_invalid_argument_from_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            SearchQuery(query="q", max_results=0)

        error = InvalidArgumentError.from_validation_error("search", exc_info.value)

        assert error.message.startswith("Invalid search arguments:")
        assert error.details["problems"]

    def test_exhausted_message_includes_last_error(self):
        error = AllProvidersExhaustedError(ProviderError("Bing search error: HTTP 401", provider="bing"))

        assert error.message == "All search providers failed. Last error: Bing search error: HTTP 401"

    def test_fetch_failure(self):
        error = FetchFailureError("https://example.com/", "HTTP 500", status_code=500)

        assert error.message == "Failed to fetch content: HTTP 500"
        assert error.details == {"url": "https://example.com/", "reason": "HTTP 500", "status_code": 500}
