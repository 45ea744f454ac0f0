"""
Domain Models - Pydantic models for ALL I/O boundaries.

This module contains all Pydantic models used throughout the layer:
- Search query/result/response records
- Fetch request and extracted web content
- Tool call / tool result envelope exposed to the agent

Models serialize with camelCase aliases (the wire format consumed by
agent hosts) and accept snake_case field names on input.
"""

from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


DateRange = Literal["day", "week", "month", "year"]
ContentType = Literal["article", "documentation", "forum", "api-reference", "general"]
ToolName = Literal["search", "fetch"]


def extract_domain(url: Optional[str]) -> str:
    """Return the hostname of a URL, or an empty string if it has none."""
    if not url:
        return ""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


class WireModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Search Models
# =============================================================================

class SearchQuery(WireModel):
    """A web search request."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., min_length=1, description="Search query text")
    max_results: int = Field(default=10, ge=1, le=50, description="Maximum number of results")
    domain: Optional[str] = Field(None, description="Restrict results to this domain")
    date_range: Optional[DateRange] = Field(None, description="Restrict results to a time period")
    language: str = Field(default="en", description="Language tag for results")


class SearchResult(WireModel):
    """A single web search result."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Result title")
    url: str = Field(..., description="Result URL")
    snippet: str = Field(default="", description="Result snippet/description")
    domain: str = Field(default="", description="Hostname derived from the URL")
    published_date: Optional[str] = Field(None, description="Publication date, if the provider knows it")

    @model_validator(mode="before")
    @classmethod
    def derive_domain(cls, data: Any) -> Any:
        """Always derive the domain from the URL, ignoring any supplied value."""
        if isinstance(data, dict):
            data = dict(data)
            data["domain"] = extract_domain(data.get("url"))
        return data


class SearchResponse(WireModel):
    """Ranked results of one search call."""

    results: List[SearchResult] = Field(default_factory=list, description="Ranked search results")
    query: str = Field(..., description="The query that was executed")
    search_time: int = Field(default=0, ge=0, description="Elapsed time in milliseconds")

    @computed_field(alias="totalResults")
    @property
    def total_results(self) -> int:
        """Number of results returned."""
        return len(self.results)


# =============================================================================
# Fetch Models
# =============================================================================

class FetchRequest(WireModel):
    """A page fetch request."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="URL to fetch")
    max_content_length: int = Field(default=50_000, gt=0, description="Maximum body size in bytes")
    timeout: int = Field(default=10_000, gt=0, description="Request timeout in milliseconds")
    follow_redirects: bool = Field(default=False, description="Whether to follow redirects")
    clean_content: bool = Field(default=True, description="Strip navigation/ads before extraction")


class ContentMetadata(WireModel):
    """Derived metadata for extracted page content."""

    word_count: int = Field(default=0, ge=0)
    reading_time: int = Field(default=0, ge=0, description="Estimated minutes at 200 words/minute")
    last_modified: Optional[str] = Field(None, description="Last-Modified response header")
    breadcrumbs: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list, description="Deduplicated tags in first-seen order")


class WebContent(WireModel):
    """Structured content record extracted from a fetched page."""

    url: str
    title: str
    content: str = Field(..., description="Full normalized text")
    excerpt: str = Field(..., description="Word-boundary truncated preview")
    published_date: Optional[str] = None
    author: Optional[str] = None
    domain: str
    content_type: ContentType = "general"
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)


# =============================================================================
# Tool Contract Models
# =============================================================================

class ToolCall(WireModel):
    """A tool invocation issued by the agent."""

    id: str = Field(..., description="Opaque tool call id")
    name: str = Field(..., description="Tool name: search or fetch")
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ContentPart(WireModel):
    """One typed part of a tool result envelope."""

    type: Literal["text", "json"]
    text: Optional[str] = None
    data: Optional[Any] = Field(None, alias="json")

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def of_json(cls, data: Any) -> "ContentPart":
        return cls(type="json", data=data)


class ToolResult(WireModel):
    """Result of a tool invocation, ready for presentation to an LLM."""

    tool_call_id: str
    result: Any = None
    is_error: bool = False
    content: List[ContentPart] = Field(default_factory=list)


class ToolDefinition(WireModel):
    """Tool description for host registration."""

    name: str
    description: str
    input_schema: Dict[str, Any]
