"""
Error taxonomy for the resolver.

Tool-engine failures derive from ToolError and carry the tool name, the
operation that failed and (when execution got that far) the partial
ToolOutput. Pipeline, signing and configuration failures have their own
branches so callers can tell them apart without string matching.
"""

from __future__ import annotations

from typing import Any, Optional


class ResolverError(Exception):
    """Base class for every error raised by this package."""


class ToolError(ResolverError):
    def __init__(
        self,
        message: str,
        tool_name: Optional[str] = None,
        op: Optional[str] = None,
        output: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.tool_name = tool_name
        self.op = op
        self.output = output

    def __str__(self) -> str:
        if self.tool_name and self.op:
            return f"tool {self.tool_name}: {self.op}: {self.message}"
        if self.tool_name:
            return f"tool {self.tool_name}: {self.message}"
        return self.message


class ValidationError(ToolError):
    """Input (or decision) failed validation. Never retried."""

    def __init__(self, field: str, message: str, value: Any = None, **kwargs):
        self.field = field
        self.reason = message
        self.value = value
        if value is not None:
            text = f"validation error: field {field}: {message} (value: {value!r})"
        else:
            text = f"validation error: field {field}: {message}"
        super().__init__(text, **kwargs)

    def __str__(self) -> str:
        return self.message


class NotFoundError(ToolError):
    pass


class AlreadyRegisteredError(ToolError):
    pass


class InvalidToolError(ToolError):
    pass


class InvalidSchemaError(InvalidToolError):
    pass


class ToolTimeoutError(ToolError, TimeoutError):
    pass


class ExecutionError(ToolError):
    pass


class ParseError(ResolverError):
    """A reasoning-service response could not be parsed."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ReasoningServiceError(ResolverError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PipelineError(ResolverError):
    """A pipeline pass failed; `step` names the pass."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class SignatureError(ResolverError):
    pass


class ConfigError(ResolverError):
    pass
