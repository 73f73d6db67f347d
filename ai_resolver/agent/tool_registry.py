"""
Tool Registry

Holds the tools the reasoning service may call. One registry is built at
startup and passed to whoever needs it; there is no module-level instance.

Lookups take a shared read lock, register/unregister/clear take an exclusive
write lock, so concurrent lookups never wait on each other.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from ai_resolver.agent.tools.base import Tool
from ai_resolver.agent.tools.types import ToolInput, ToolOutput, ToolType
from ai_resolver.errors import (
    AlreadyRegisteredError,
    InvalidSchemaError,
    InvalidToolError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ToolRegistry:
    def __init__(self):
        self._tools: Dict[str, Tool] = {}
        self._lock = ReadWriteLock()

    def register(self, tool: Optional[Tool]) -> None:
        """
        Register a tool.

        Raises:
            InvalidToolError: tool is None or has an empty name
            InvalidSchemaError: the tool's parameter schema is malformed
            AlreadyRegisteredError: a tool with this name exists
        """
        if tool is None:
            raise InvalidToolError("cannot register None", op="register")
        if not tool.name:
            raise InvalidToolError("tool name cannot be empty", op="register")
        if tool.schema is not None:
            try:
                tool.schema.validate()
            except InvalidSchemaError as e:
                e.tool_name, e.op = tool.name, "register"
                raise

        with self._lock.write():
            if tool.name in self._tools:
                raise AlreadyRegisteredError("tool already registered", tool_name=tool.name, op="register")
            self._tools[tool.name] = tool
        logger.info(f"[tool_registry] Registered tool {tool.name} ({tool.tool_type.value})")

    def unregister(self, name: str) -> None:
        if not name:
            raise InvalidToolError("tool name cannot be empty", op="unregister")
        with self._lock.write():
            if name not in self._tools:
                raise NotFoundError("tool not found", tool_name=name, op="unregister")
            del self._tools[name]
        logger.info(f"[tool_registry] Unregistered tool {name}")

    def get(self, name: str) -> Tool:
        with self._lock.read():
            tool = self._tools.get(name)
        if tool is None:
            raise NotFoundError("tool not found", tool_name=name, op="get")
        return tool

    def list(self) -> List[Tool]:
        with self._lock.read():
            return list(self._tools.values())

    def list_by_type(self, tool_type: Union[ToolType, str]) -> List[Tool]:
        tool_type = ToolType(tool_type)
        with self._lock.read():
            return [t for t in self._tools.values() if t.tool_type == tool_type]

    def names(self) -> List[str]:
        with self._lock.read():
            return list(self._tools)

    async def execute_tool(self, name: str, tool_input: Optional[ToolInput] = None) -> ToolOutput:
        tool = self.get(name)
        return await tool.execute(tool_input)

    def to_openai_spec(self) -> List[Dict[str, Any]]:
        """All registered tools in the Responses API tool format."""
        return [tool.to_openai_spec() for tool in self.list()]

    def count(self) -> int:
        with self._lock.read():
            return len(self._tools)

    def has(self, name: str) -> bool:
        with self._lock.read():
            return name in self._tools

    def clear(self) -> None:
        with self._lock.write():
            self._tools.clear()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)
