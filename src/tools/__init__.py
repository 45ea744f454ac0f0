from .orchestrator import ToolOrchestrator
from .web_fetch import WebFetchTool
from .web_search import WebSearchTool

__all__ = [
    "ToolOrchestrator",
    "WebFetchTool",
    "WebSearchTool",
]
