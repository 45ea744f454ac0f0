"""
Web Search Tool - Searches the web through the provider aggregator.

Maps raw tool arguments into a SearchQuery, optionally sharpens the
query for the configured vertical, and formats the ranked results as a
multi-part content envelope.
"""

from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from src.application.services.search_aggregator import SearchAggregator
from src.config.logging import get_logger
from src.domain.exceptions import InvalidArgumentError
from src.domain.models import ContentPart, SearchQuery, SearchResponse, ToolDefinition

logger = get_logger(__name__)

MAX_RESULTS_LIMIT = 50


class WebSearchTool:
    """
    Tool for searching the web with provider failover.
    """

    name: str = "search"
    description: str = (
        "Search the web for information, documentation, solutions, and best practices. "
        "Returns ranked results with title, URL, snippet and source domain."
    )

    # JSON Schema for function calling
    parameters: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query",
            },
            "max_results": {
                "type": "integer",
                "description": "Maximum number of results to return (default: 10, max: 50)",
                "default": 10,
                "minimum": 1,
                "maximum": MAX_RESULTS_LIMIT,
            },
            "domain": {
                "type": "string",
                "description": "Restrict search to a specific domain (e.g., docs.python.org)",
            },
            "date_range": {
                "type": "string",
                "enum": ["day", "week", "month", "year"],
                "description": "Restrict search to content from a specific time period",
            },
            "language": {
                "type": "string",
                "description": "Language for search results (default: en)",
                "default": "en",
            },
        },
        "required": ["query"],
    }

    def __init__(
        self,
        aggregator: SearchAggregator,
        vertical_keywords: Sequence[str] = (),
        vertical_qualifier: str = "",
        problem_terms: Sequence[str] = ("error", "issue"),
        default_max_results: int = 10,
    ):
        """
        Initialize the search tool.

        Args:
            aggregator: Provider aggregator
            vertical_keywords: Terms that mark a query as belonging to the vertical
            vertical_qualifier: Term appended to vertical queries that lack it
            problem_terms: Terms that add a "solution" qualifier to vertical queries
            default_max_results: max_results used when the caller omits it
        """
        self._aggregator = aggregator
        self._vertical_keywords = tuple(k.lower() for k in vertical_keywords)
        self._vertical_qualifier = vertical_qualifier
        self._problem_terms = tuple(t.lower() for t in problem_terms)
        self._default_max_results = default_max_results

    async def execute(self, query: SearchQuery) -> SearchResponse:
        """Run a validated query through the aggregator."""
        return await self._aggregator.search(query)

    async def execute_from_dict(self, params: Dict[str, Any]) -> SearchResponse:
        """
        Execute from raw tool-call arguments.

        Args:
            params: Dictionary with query and optional max_results, domain,
                date_range and language

        Returns:
            SearchResponse with ranked results
        """
        return await self.execute(self.build_query(params))

    def build_query(self, params: Dict[str, Any]) -> SearchQuery:
        """Map raw arguments into an (optionally enhanced) SearchQuery."""
        text = params.get("query")
        if not isinstance(text, str) or not text.strip():
            raise InvalidArgumentError("Missing required argument: query", field="query")

        max_results = params.get("max_results") or self._default_max_results
        if isinstance(max_results, int):
            max_results = max(1, min(max_results, MAX_RESULTS_LIMIT))

        try:
            query = SearchQuery(
                query=text.strip(),
                max_results=max_results,
                domain=params.get("domain") or None,
                date_range=params.get("date_range") or None,
                language=params.get("language") or "en",
            )
        except ValidationError as e:
            raise InvalidArgumentError.from_validation_error(self.name, e) from e

        enhanced = self.enhance_query(query.query)
        if enhanced != query.query:
            logger.debug("search_query_enhanced", original=query.query, enhanced=enhanced)
            query = query.model_copy(update={"query": enhanced})
        return query

    def enhance_query(self, text: str) -> str:
        """Add vertical qualifiers when the query matches a vertical keyword."""
        lowered = text.lower()
        if not any(keyword in lowered for keyword in self._vertical_keywords):
            return text

        additions = []
        if self._vertical_qualifier and self._vertical_qualifier.lower() not in lowered:
            additions.append(self._vertical_qualifier)
        if any(term in lowered for term in self._problem_terms):
            additions.append("solution")

        return f"{text} {' '.join(additions)}" if additions else text

    @staticmethod
    def format_content(response: SearchResponse) -> List[ContentPart]:
        """Summary line, the raw results as JSON, then one text part per result."""
        content = [
            ContentPart.of_text(
                f'Found {response.total_results} results for "{response.query}" '
                f"({response.search_time}ms)"
            ),
            ContentPart.of_json(
                [r.model_dump(mode="json", by_alias=True) for r in response.results]
            ),
        ]

        if not response.results:
            content.append(
                ContentPart.of_text(
                    "No results found. Try adjusting your search query or search terms."
                )
            )
            return content

        for index, result in enumerate(response.results, start=1):
            published = f" | Published: {result.published_date}" if result.published_date else ""
            content.append(
                ContentPart.of_text(
                    f"**{index}. {result.title}**\n{result.url}\n{result.snippet}\n"
                    f"*Source: {result.domain}*{published}\n"
                )
            )
        return content

    def get_tool_definition(self) -> ToolDefinition:
        """Get the tool definition for LLM function calling."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.parameters,
        )
