from .models import (
    # Search Models
    SearchQuery,
    SearchResult,
    SearchResponse,
    # Fetch Models
    FetchRequest,
    ContentMetadata,
    WebContent,
    # Tool Contract Models
    ToolCall,
    ToolResult,
    ContentPart,
    ToolDefinition,
)
from .exceptions import (
    WebIntelException,
    InvalidArgumentError,
    RateLimitedError,
    BlockedURLError,
    ProviderError,
    NoProvidersAvailableError,
    AllProvidersExhaustedError,
    FetchFailureError,
)

__all__ = [
    # Search Models
    "SearchQuery",
    "SearchResult",
    "SearchResponse",
    # Fetch Models
    "FetchRequest",
    "ContentMetadata",
    "WebContent",
    # Tool Contract Models
    "ToolCall",
    "ToolResult",
    "ContentPart",
    "ToolDefinition",
    # Exceptions
    "WebIntelException",
    "InvalidArgumentError",
    "RateLimitedError",
    "BlockedURLError",
    "ProviderError",
    "NoProvidersAvailableError",
    "AllProvidersExhaustedError",
    "FetchFailureError",
]
