"""
Tool Router

Routes tool calls coming from the reasoning service to the registry and turns
the outcome into a JSON-safe envelope the model can read:

    {"success": True, "data": ..., "call_id": ...}
    {"success": False, "error": "..."}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from ai_resolver.agent.tool_registry import ToolRegistry
from ai_resolver.agent.tools.types import ToolInput, ToolType
from ai_resolver.errors import NotFoundError, ToolError

logger = logging.getLogger(__name__)


class ToolClient(Protocol):
    async def call(self, tool_name: str, tool_args: Any, call_id: Optional[str] = None) -> Dict[str, Any]: ...


class RegistryToolClient:
    """
    Calls tools through a ToolRegistry (so schema validation and middleware apply).
    """

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    async def call(self, tool_name: str, tool_args: Any, call_id: Optional[str] = None) -> Dict[str, Any]:
        try:
            tool = self._registry.get(tool_name)
        except NotFoundError:
            available = ", ".join(self._registry.names())
            return {"success": False, "error": f"Unknown tool: {tool_name}. Available tools: {available}"}

        if tool.tool_type == ToolType.CUSTOM:
            raw = tool_args if isinstance(tool_args, str) else json.dumps(tool_args)
            tool_input = ToolInput(raw_input=raw, call_id=call_id or "")
        else:
            if isinstance(tool_args, str):
                try:
                    tool_args = json.loads(tool_args) if tool_args.strip() else {}
                except json.JSONDecodeError as e:
                    return {"success": False, "error": f"Invalid JSON arguments: {e}"}
            if not isinstance(tool_args, dict):
                return {"success": False, "error": "Tool arguments must be a JSON object"}
            tool_input = ToolInput(arguments=tool_args, call_id=call_id or "")

        try:
            output = await tool.execute(tool_input)
        except ToolError as e:
            logger.warning(f"[tool_router] {tool_name} failed: {e}")
            return {"success": False, "error": str(e)}

        return {"success": True, "data": output.data, "call_id": output.call_id}
