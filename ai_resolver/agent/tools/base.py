"""
Base tool class for resolver tools

A tool is a named capability the reasoning service can call. Tools are either
declared by subclassing (class attributes + `run`) or built directly from an
executor function:

    calc = Tool(name="calculate", description="...", schema={...}, executor=fn)

Executors may be sync or async. They return a ToolOutput or plain data (which
is wrapped into one) and signal failure by raising.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from ai_resolver.agent.tools.types import (
    Executor,
    Middleware,
    ToolInput,
    ToolOutput,
    ToolType,
)
from ai_resolver.agent.validation.schemas import ToolSchema
from ai_resolver.errors import ExecutionError, ToolError, ValidationError

logger = logging.getLogger(__name__)

Validator = Callable[[ToolInput], None]


def as_executor(fn: Callable[[ToolInput], Any]) -> Executor:
    """Adapt a sync or async function into an async executor returning ToolOutput."""
    # Callable objects with an async __call__ are not coroutine functions themselves.
    if inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None)):

        async def call(tool_input: ToolInput) -> Any:
            return await fn(tool_input)

    else:

        async def call(tool_input: ToolInput) -> Any:
            # Sync executors run in a worker thread so they never block the loop.
            return await asyncio.to_thread(fn, tool_input)

    async def executor(tool_input: ToolInput) -> ToolOutput:
        result = await call(tool_input)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, ToolOutput):
            return result
        return ToolOutput(data=result)

    return executor


class Tool:
    """
    Base class for all resolver tools.

    Tools are:
    - Named and typed (function / custom / web_search_preview)
    - Validated before every execution
    - Wrapped by middleware attached with `use`
    """

    name: str = ""
    description: str = ""
    tool_type: ToolType = ToolType.FUNCTION
    input_schema: Optional[Dict[str, Any]] = None

    def __init__(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        tool_type: Optional[Union[ToolType, str]] = None,
        schema: Optional[Union[ToolSchema, Dict[str, Any]]] = None,
        executor: Optional[Callable[[ToolInput], Any]] = None,
    ):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        self.tool_type = ToolType(tool_type if tool_type is not None else self.tool_type)

        if schema is None and self.input_schema is not None:
            schema = self.input_schema
        if isinstance(schema, dict):
            schema = ToolSchema.from_dict(schema)
        self.schema: Optional[ToolSchema] = schema

        if executor is None and type(self).run is not Tool.run:
            executor = self.run
        self._executor: Optional[Executor] = as_executor(executor) if executor else None
        self._middleware: List[Middleware] = []
        self._validator: Optional[Validator] = None
        self._chain: Optional[Executor] = self._executor

    def __repr__(self) -> str:
        return f"<Tool {self.name!r} type={self.tool_type.value}>"

    async def run(self, tool_input: ToolInput) -> Any:
        """Override in subclasses that do not pass an executor."""
        raise NotImplementedError

    @property
    def middleware(self) -> List[Middleware]:
        return list(self._middleware)

    def use(self, *middleware: Middleware) -> "Tool":
        """
        Attach middleware. The first attached middleware is the outermost
        wrapper; the chain is rebuilt here, not on every call.
        """
        self._middleware.extend(middleware)
        self._chain = self._build_chain()
        return self

    def set_validator(self, validator: Optional[Validator]) -> "Tool":
        """Attach an extra check run after schema validation. It should raise ValidationError."""
        self._validator = validator
        return self

    def _build_chain(self) -> Optional[Executor]:
        if self._executor is None:
            return None
        chain = self._executor
        for mw in reversed(self._middleware):
            chain = mw(chain)
        return chain

    def validate(self, tool_input: ToolInput) -> None:
        """
        Validate an invocation.

        Raises:
            ValidationError: missing arguments/raw input, or arguments that do
                not match the schema.
        """
        if self.tool_type == ToolType.FUNCTION:
            if tool_input.arguments is None:
                raise ValidationError("arguments", "arguments are required for function tools")
            if self.schema is not None:
                self.schema.validate_input(tool_input.arguments)
        elif self.tool_type == ToolType.CUSTOM:
            if not tool_input.raw_input:
                raise ValidationError("rawInput", "raw input is required for custom tools")

        if self._validator is not None:
            self._validator(tool_input)

    async def execute(self, tool_input: Optional[ToolInput] = None) -> ToolOutput:
        """
        Validate and run the tool through its middleware chain.

        Returns:
            ToolOutput with data, call id and execution time set.

        Raises:
            ToolError: a typed failure. `err.output` holds the failed ToolOutput.
        """
        tool_input = (tool_input or ToolInput()).with_defaults()
        start = time.perf_counter()
        try:
            self.validate(tool_input)
            if self._chain is None:
                raise ExecutionError("no executor configured")
            output = await self._chain(tool_input)
        except ToolError as e:
            op = "validate" if isinstance(e, ValidationError) else "execute"
            self._attach_failure(e, tool_input, start, op)
            raise
        except Exception as e:
            err = ExecutionError(str(e) or type(e).__name__)
            self._attach_failure(err, tool_input, start, "execute")
            raise err from e

        output.call_id = tool_input.call_id
        output.execution_time = time.perf_counter() - start
        return output

    def _attach_failure(self, err: ToolError, tool_input: ToolInput, start: float, op: str) -> None:
        output = err.output if isinstance(err.output, ToolOutput) else ToolOutput()
        err.tool_name = err.tool_name or self.name
        err.op = err.op or op
        output.error = str(err)
        output.call_id = tool_input.call_id
        output.execution_time = time.perf_counter() - start
        err.output = output

    def to_openai_spec(self) -> Dict[str, Any]:
        """
        Convert tool to the Responses API tool format.

        Returns:
            Flat dict: type, name, description and (for typed tools) parameters.
        """
        if self.tool_type == ToolType.WEB_SEARCH_PREVIEW:
            return {"type": "web_search_preview"}

        spec: Dict[str, Any] = {
            "type": self.tool_type.value,
            "name": self.name,
            "description": self.description,
        }
        if self.tool_type == ToolType.FUNCTION and self.schema is not None:
            spec["parameters"] = self.schema.to_dict()
            if self.schema.strict:
                spec["strict"] = True
        return spec
