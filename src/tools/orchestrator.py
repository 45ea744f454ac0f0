"""
Tool Orchestrator - Single entry point for agent tool calls.

Validates the tool name, dispatches to the search or fetch tool, and
wraps the outcome in a ToolResult. Every failure is converted into an
error result; no exception escapes to the caller.
"""

import time
from typing import Dict, List, Union

from src.config.logging import get_tool_call_logger
from src.domain.exceptions import InvalidArgumentError, WebIntelException
from src.domain.models import ContentPart, ToolCall, ToolDefinition, ToolResult
from src.tools.web_fetch import WebFetchTool
from src.tools.web_search import WebSearchTool

Tool = Union[WebSearchTool, WebFetchTool]


class ToolOrchestrator:
    """
    Dispatches tool calls to the registered web tools.
    """

    def __init__(self, search_tool: WebSearchTool, fetch_tool: WebFetchTool):
        self._tools: Dict[str, Tool] = {
            search_tool.name: search_tool,
            fetch_tool.name: fetch_tool,
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def get_tool_definitions(self) -> List[ToolDefinition]:
        """Definitions of every registered tool, for host registration."""
        return [tool.get_tool_definition() for tool in self._tools.values()]

    async def execute(self, call: ToolCall) -> ToolResult:
        """
        Execute a tool call.

        Args:
            call: Tool call issued by the agent

        Returns:
            ToolResult; ``is_error`` is set instead of raising on failure
        """
        tool_log = get_tool_call_logger(call.id, call.name)
        start_time = time.time()
        tool_log.tool_start(call.arguments)

        try:
            tool = self._tools.get(call.name)
            if tool is None:
                raise InvalidArgumentError(
                    f"Unknown tool: {call.name}",
                    field="name",
                    details={"available_tools": self.tool_names},
                )

            result = await tool.execute_from_dict(call.arguments)
            content = tool.format_content(result)

        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            if isinstance(e, WebIntelException):
                payload = e.to_dict()
            else:
                payload = {
                    "error": str(e) or type(e).__name__,
                    "code": "INTERNAL_ERROR",
                    "details": {"error_type": type(e).__name__},
                }

            tool_log.tool_error(payload["error"], code=payload["code"], duration_ms=duration_ms)

            return ToolResult(
                tool_call_id=call.id,
                result=payload,
                is_error=True,
                content=[ContentPart.of_text(f"Error executing {call.name}: {payload['error']}")],
            )

        duration_ms = int((time.time() - start_time) * 1000)
        record = result.model_dump(mode="json", by_alias=True)
        tool_log.tool_complete(
            duration_ms,
            result_count=record.get("totalResults"),
            result_summary=record.get("title"),
        )

        return ToolResult(
            tool_call_id=call.id,
            result=record,
            is_error=False,
            content=content,
        )
