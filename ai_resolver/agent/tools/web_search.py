"""
web_search tool

Live retrieval is performed by the reasoning service itself; registering this
tool only advertises `web_search_preview` in the tool list. The executor is a
marker in case something routes a call here anyway.
"""

from __future__ import annotations

from ai_resolver.agent.tools.base import Tool
from ai_resolver.agent.tools.types import ToolInput, ToolType


class WebSearchTool(Tool):
    name = "web_search"
    description = (
        "Search the web for current information using the reasoning service's integrated web search. "
        "The model uses this automatically when it needs up-to-date information from the internet."
    )
    tool_type = ToolType.WEB_SEARCH_PREVIEW

    async def run(self, tool_input: ToolInput) -> dict:
        return {"message": "Web search is handled by the reasoning service", "status": "delegated"}
