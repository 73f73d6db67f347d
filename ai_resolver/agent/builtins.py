"""
Built-in tools.

`default_registry` builds a registry with every built-in tool, each wrapped in
the standard middleware stack.
"""

from __future__ import annotations

from typing import Optional

from ai_resolver.agent.metrics import MetricsCollector
from ai_resolver.agent.middleware import (
    logging_middleware,
    metrics_middleware,
    recovery_middleware,
    timeout_middleware,
    timing_middleware,
)
from ai_resolver.agent.tool_registry import ToolRegistry
from ai_resolver.agent.tools.calculator import CalculatorTool
from ai_resolver.agent.tools.date_time import DateTimeTool
from ai_resolver.agent.tools.market_data import MarketDataClient, MarketDataTool
from ai_resolver.agent.tools.web_search import WebSearchTool


def default_registry(
    market_client: Optional[MarketDataClient] = None,
    metrics: Optional[MetricsCollector] = None,
    tool_timeout: float = 30.0,
) -> ToolRegistry:
    """Register the built-in tools. get_market_data is only added when a market client is given."""
    tools = [WebSearchTool(), CalculatorTool(), DateTimeTool()]
    if market_client is not None:
        tools.append(MarketDataTool(market_client))

    registry = ToolRegistry()
    for tool in tools:
        tool.use(recovery_middleware(), logging_middleware(), timing_middleware())
        if metrics is not None:
            tool.use(metrics_middleware(metrics, tool.name))
        tool.use(timeout_middleware(tool_timeout))
        registry.register(tool)
    return registry
