"""
Web Fetch Tool - Fetches a page and returns its extracted content.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from src.application.services.fetch_service import FetchService
from src.domain.exceptions import InvalidArgumentError
from src.domain.models import ContentPart, FetchRequest, ToolDefinition, WebContent


class WebFetchTool:
    """
    Tool for retrieving a URL as structured, cleaned content.
    """

    name: str = "fetch"
    description: str = (
        "Fetch and extract content from a specific URL. Useful for retrieving "
        "documentation, articles, or specific web pages."
    )

    parameters: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "The URL to fetch content from",
            },
            "max_content_length": {
                "type": "integer",
                "description": "Maximum content length in bytes (default: 50000)",
                "default": 50_000,
            },
            "timeout": {
                "type": "integer",
                "description": "Request timeout in milliseconds (default: 10000)",
                "default": 10_000,
            },
            "follow_redirects": {
                "type": "boolean",
                "description": "Whether to follow redirects (default: true)",
                "default": True,
            },
            "clean_content": {
                "type": "boolean",
                "description": "Whether to clean HTML and extract main content (default: true)",
                "default": True,
            },
        },
        "required": ["url"],
    }

    def __init__(
        self,
        fetch_service: FetchService,
        default_max_content_length: int = 50_000,
        default_timeout_ms: int = 10_000,
    ):
        self._fetch_service = fetch_service
        self._default_max_content_length = default_max_content_length
        self._default_timeout_ms = default_timeout_ms

    async def execute(self, request: FetchRequest) -> WebContent:
        # Reject blocked URLs before touching the rate limiter or network
        self._fetch_service.validate_url(request.url)
        return await self._fetch_service.fetch(request)

    async def execute_from_dict(self, params: Dict[str, Any]) -> WebContent:
        """Execute from raw tool-call arguments."""
        return await self.execute(self.build_request(params))

    def build_request(self, params: Dict[str, Any]) -> FetchRequest:
        """Map raw arguments into a FetchRequest, applying tool defaults."""
        url = params.get("url")
        if not isinstance(url, str) or not url.strip():
            raise InvalidArgumentError("Missing required argument: url", field="url")

        try:
            return FetchRequest(
                url=url.strip(),
                max_content_length=params.get("max_content_length") or self._default_max_content_length,
                timeout=params.get("timeout") or self._default_timeout_ms,
                follow_redirects=params.get("follow_redirects") is not False,
                clean_content=params.get("clean_content") is not False,
            )
        except ValidationError as e:
            raise InvalidArgumentError.from_validation_error(self.name, e) from e

    @staticmethod
    def format_content(page: WebContent) -> List[ContentPart]:
        """Metadata header, navigation, byline, body, tags, then the full record as JSON."""
        metadata = page.metadata
        content = [
            ContentPart.of_text(
                f"**{page.title}**\n*Source: {page.url}*\n"
                f"*Content Type: {page.content_type}* | "
                f"*Reading Time: {metadata.reading_time} min* | "
                f"*Words: {metadata.word_count}*"
            )
        ]

        if metadata.breadcrumbs:
            content.append(ContentPart.of_text(f"**Navigation:** {' > '.join(metadata.breadcrumbs)}"))

        byline = []
        if page.author:
            byline.append(f"Author: {page.author}")
        if page.published_date:
            byline.append(f"Published: {page.published_date}")
        if byline:
            content.append(ContentPart.of_text(" | ".join(byline)))

        content.append(ContentPart.of_text(f"**Content:**\n{page.content}"))

        if metadata.tags:
            content.append(ContentPart.of_text(f"**Tags:** {', '.join(metadata.tags)}"))

        content.append(ContentPart.of_json(page.model_dump(mode="json", by_alias=True)))
        return content

    def get_tool_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.parameters,
        )
