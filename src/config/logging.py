"""
Structured Logging Configuration using structlog.

Every tool call, provider attempt and page fetch is logged as a
snake_case event with key/value context so failover decisions can be
followed in the console or shipped as JSON.
"""

import logging
import sys
from typing import Any, Dict, Literal, Optional

import structlog
from structlog.typing import Processor

from src.config.settings import get_settings


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[Literal["json", "text"]] = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override log format (json for production, text for development)
    """
    settings = get_settings()
    level = log_level or settings.app.log_level
    fmt = log_format or settings.app.log_format

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        processors: list[Processor] = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        )
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.ERROR)
    logging.getLogger("asyncio").setLevel(logging.ERROR)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# =============================================================================
# Tool Call Logging
# =============================================================================

class ToolCallLogger:
    """
    Logger bound to a single tool invocation.

    Every event carries the tool call id and tool name so the lifecycle of
    one call can be reassembled from interleaved concurrent output.
    """

    def __init__(
        self,
        tool_call_id: str,
        tool_name: str,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.tool_call_id = tool_call_id
        self.tool_name = tool_name
        self.logger = logger or get_logger("webintel.tools")

    def _log(self, level: str, event: str, **kwargs: Any) -> None:
        log_method = getattr(self.logger, level)
        log_method(
            event,
            tool_call_id=self.tool_call_id,
            tool=self.tool_name,
            **kwargs,
        )

    def tool_start(self, arguments: Dict[str, Any]) -> None:
        """
        Log the start of a tool execution.

        Args:
            arguments: Raw arguments supplied by the caller
        """
        self._log("info", "tool_execution_start", arguments=arguments)

    def tool_complete(
        self,
        duration_ms: int,
        result_count: Optional[int] = None,
        result_summary: Optional[str] = None,
    ) -> None:
        """
        Log successful tool completion.

        Args:
            duration_ms: Execution time in milliseconds
            result_count: Number of results (if applicable)
            result_summary: Brief summary of results
        """
        self._log(
            "info",
            "tool_execution_complete",
            duration_ms=duration_ms,
            result_count=result_count,
            result_summary=result_summary,
        )

    def tool_error(
        self,
        error: str,
        code: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> None:
        """
        Log tool execution error.

        Args:
            error: Error message
            code: Machine-readable error code
            duration_ms: Execution time before error
        """
        self._log(
            "error",
            "tool_execution_error",
            error=error,
            code=code,
            duration_ms=duration_ms,
        )


def get_tool_call_logger(tool_call_id: str, tool_name: str) -> ToolCallLogger:
    """Get a ToolCallLogger for a specific tool invocation."""
    return ToolCallLogger(tool_call_id, tool_name)
