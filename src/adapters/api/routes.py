"""
FastAPI Routes - REST API endpoints for the web tools.

Endpoints:
- GET /tools - List tool definitions for host registration
- POST /tools/execute - Execute a search or fetch tool call
- GET /health - Health check

Tool failures are reported in-band (``isError`` on the ToolResult), so
/tools/execute answers 200 for every well-formed call.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from src.adapters.api.dependencies import get_orchestrator, get_search_aggregator
from src.application.services.search_aggregator import SearchAggregator
from src.config.logging import get_logger
from src.config.settings import get_settings
from src.domain.models import ToolCall, ToolDefinition, ToolResult
from src.tools.orchestrator import ToolOrchestrator

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Tool Endpoints
# =============================================================================

@router.get(
    "/tools",
    response_model=List[ToolDefinition],
    response_model_by_alias=True,
    summary="List Tools",
    description="Return the name, description and JSON input schema of every tool.",
)
async def list_tools(
    orchestrator: ToolOrchestrator = Depends(get_orchestrator),
) -> List[ToolDefinition]:
    return orchestrator.get_tool_definitions()


@router.post(
    "/tools/execute",
    response_model=ToolResult,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Execute Tool Call",
    description="""
    Execute a `search` or `fetch` tool call.

    **Example calls:**
    - `{"id": "call-1", "name": "search", "arguments": {"query": "business rule abort"}}`
    - `{"id": "call-2", "name": "fetch", "arguments": {"url": "https://docs.python.org/3/"}}`

    Errors (unknown tool, bad arguments, blocked URL, provider exhaustion,
    fetch failure) come back as a ToolResult with `isError: true`.
    """,
)
async def execute_tool(
    call: ToolCall,
    orchestrator: ToolOrchestrator = Depends(get_orchestrator),
) -> ToolResult:
    result = await orchestrator.execute(call)
    if result.is_error:
        logger.warning(
            "tool_call_failed",
            tool_call_id=call.id,
            tool_name=call.name,
            code=result.result.get("code") if isinstance(result.result, dict) else None,
        )
    return result


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    summary="Health Check",
    description="Report service status and the configured search provider rotation.",
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "components": {
                            "search_providers": ["google", "bing", "duckduckgo"],
                            "active_provider": "google",
                            "tools": ["search", "fetch"],
                        },
                    }
                }
            },
        },
    },
)
async def health_check(
    aggregator: SearchAggregator = Depends(get_search_aggregator),
    orchestrator: ToolOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Check service health."""
    settings = get_settings()
    providers = aggregator.provider_names

    return {
        "status": "healthy" if providers else "degraded",
        "version": settings.app.version,
        "components": {
            "search_providers": providers,
            "active_provider": providers[aggregator.cursor] if providers else None,
            "tools": orchestrator.tool_names,
        },
    }
