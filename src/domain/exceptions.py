"""
Custom Exceptions for the web intelligence layer.

Hierarchical exception structure for clean error handling. Every
terminal failure is converted into an error ToolResult at the
orchestrator boundary using ``to_dict()``.
"""

from typing import Any, Dict, Optional


class WebIntelException(Exception):
    """
    Base exception for all web intelligence errors.

    Provides structured error information for logging and tool results.
    """

    def __init__(
        self,
        message: str,
        code: str = "WEB_INTEL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Request Errors
# =============================================================================

class InvalidArgumentError(WebIntelException):
    """Raised for a missing/invalid tool argument or an unknown tool name."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_ARGUMENT",
            details={**(details or {}), "field": field} if field else details,
        )
        self.field = field

    @classmethod
    def from_validation_error(cls, tool_name: str, error: Any) -> "InvalidArgumentError":
        """Build from a pydantic ValidationError raised while mapping tool arguments."""
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in error.errors()
        ]
        first_loc = error.errors()[0]["loc"] if error.errors() else ()
        return cls(
            message=f"Invalid {tool_name} arguments: {'; '.join(problems)}",
            field=str(first_loc[0]) if first_loc else None,
            details={"problems": problems},
        )


class RateLimitedError(WebIntelException):
    """Raised when a per-provider or per-domain request window is full."""

    def __init__(self, key: str, limit: int):
        super().__init__(
            message=f"Rate limit exceeded for {key} ({limit} requests per minute)",
            code="RATE_LIMITED",
            details={"key": key, "limit": limit},
        )
        self.key = key
        self.limit = limit


class BlockedURLError(WebIntelException):
    """Raised when a URL uses a disallowed protocol or a blocklisted host."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            message=f"URL is not fetchable or is blocked: {reason}",
            code="BLOCKED_URL",
            details={"url": url, "reason": reason},
        )
        self.url = url
        self.reason = reason


# =============================================================================
# Search Errors
# =============================================================================

class ProviderError(WebIntelException):
    """Network or parse failure from a single search backend."""

    def __init__(
        self,
        message: str,
        provider: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="PROVIDER_ERROR",
            details={**(details or {}), "provider": provider},
        )
        self.provider = provider


class NoProvidersAvailableError(WebIntelException):
    """Raised when the aggregator has no configured providers."""

    def __init__(self) -> None:
        super().__init__(
            message="No search providers available. Please configure API keys.",
            code="NO_PROVIDERS_AVAILABLE",
        )


class AllProvidersExhaustedError(WebIntelException):
    """Raised once every configured provider has been tried without success."""

    def __init__(
        self,
        last_error: Optional[BaseException] = None,
        rate_limited: Optional[list] = None,
    ):
        reason = str(last_error) if last_error is not None else "all providers rate limited"
        super().__init__(
            message=f"All search providers failed. Last error: {reason}",
            code="ALL_PROVIDERS_EXHAUSTED",
            details={
                "last_error": reason,
                "rate_limited": rate_limited or [],
            },
        )
        self.last_error = last_error


# =============================================================================
# Fetch Errors
# =============================================================================

class FetchFailureError(WebIntelException):
    """Terminal failure for a page fetch (timeout, size cap, status, rate limit)."""

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: Optional[int] = None,
    ):
        details: Dict[str, Any] = {"url": url, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=f"Failed to fetch content: {reason}",
            code="FETCH_FAILURE",
            details=details,
        )
        self.url = url
        self.reason = reason
        self.status_code = status_code
