from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional


class ToolType(str, Enum):
    FUNCTION = "function"
    CUSTOM = "custom"
    WEB_SEARCH_PREVIEW = "web_search_preview"


@dataclass(frozen=True)
class ToolInput:
    """
    One invocation of a tool.

    Typed (function) tools read `arguments`; free-text (custom) tools read
    `raw_input`. `call_id` and `timestamp` are filled in by `with_defaults`.
    """

    arguments: Optional[Dict[str, Any]] = None
    raw_input: str = ""
    call_id: str = ""
    timestamp: int = 0

    def with_defaults(self) -> "ToolInput":
        changes: Dict[str, Any] = {}
        if not self.call_id:
            changes["call_id"] = f"call_{time.time_ns()}"
        if not self.timestamp:
            changes["timestamp"] = int(time.time())
        return replace(self, **changes) if changes else self


@dataclass
class ToolOutput:
    data: Any = None
    error: Optional[str] = None
    call_id: str = ""
    execution_time: float = 0.0
    logs: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def add_log(self, message: str) -> None:
        self.logs.append(message)


Executor = Callable[[ToolInput], Awaitable[ToolOutput]]
Middleware = Callable[[Executor], Executor]
