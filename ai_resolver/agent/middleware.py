"""
Execution middleware for tools.

A middleware takes the next executor and returns a new one. Attach them with
`Tool.use(...)`; the first one attached is the outermost wrapper, so

    tool.use(recovery_middleware(), logging_middleware(), timeout_middleware(5))

recovers around logging, which logs around the timeout.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from ai_resolver.agent.metrics import MetricsCollector
from ai_resolver.agent.tools.types import Executor, Middleware, ToolInput, ToolOutput
from ai_resolver.errors import ExecutionError, ToolError, ToolTimeoutError, ValidationError

logger = logging.getLogger(__name__)


def _failed_output(err: BaseException) -> ToolOutput:
    output = getattr(err, "output", None)
    if isinstance(output, ToolOutput):
        return output
    return ToolOutput(error=str(err))


def logging_middleware(log: Optional[logging.Logger] = None) -> Middleware:
    log = log or logger

    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            log.info(f"[tool] Starting execution (call_id={tool_input.call_id})")
            start = time.perf_counter()
            try:
                output = await next_executor(tool_input)
            except Exception as e:
                duration = time.perf_counter() - start
                log.warning(
                    f"[tool] Execution failed (call_id={tool_input.call_id}, duration={duration:.3f}s, error={e})"
                )
                raise
            duration = time.perf_counter() - start
            log.info(f"[tool] Execution completed (call_id={tool_input.call_id}, duration={duration:.3f}s)")
            return output

        return executor

    return middleware


def timing_middleware() -> Middleware:
    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            start = time.perf_counter()
            output = await next_executor(tool_input)
            output.execution_time = time.perf_counter() - start
            output.add_log(f"Execution time: {output.execution_time:.6f}s")
            return output

        return executor

    return middleware


def timeout_middleware(timeout: float) -> Middleware:
    """
    Race the wrapped execution against a deadline.

    On expiry the caller gets ToolTimeoutError right away and the abandoned
    task is cancelled. Sync executors running in a worker thread cannot be
    interrupted; their eventual result is dropped.
    """

    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            task = asyncio.ensure_future(next_executor(tool_input))
            try:
                done, _ = await asyncio.wait({task}, timeout=timeout)
            except asyncio.CancelledError:
                task.cancel()
                raise
            if task in done:
                return task.result()

            task.cancel()
            message = f"execution timed out after {timeout}s"
            raise ToolTimeoutError(message, output=ToolOutput(error=message, call_id=tool_input.call_id))

        return executor

    return middleware


def recovery_middleware() -> Middleware:
    """Turn unexpected exceptions into an ExecutionError failure. Typed ToolErrors pass through."""

    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            try:
                return await next_executor(tool_input)
            except ToolError:
                raise
            except Exception as e:
                logger.exception(f"[tool] Recovered from exception (call_id={tool_input.call_id})")
                output = ToolOutput(call_id=tool_input.call_id)
                output.add_log(f"Recovered from exception: {e!r}")
                err = ExecutionError(f"tool execution raised {type(e).__name__}: {e}", output=output)
                output.error = str(err)
                raise err from e

        return executor

    return middleware


def retry_middleware(max_retries: int, delay: float = 0.0) -> Middleware:
    """
    Retry failed executions up to `max_retries` extra times with a fixed delay.

    Validation failures and caller cancellation are never retried. When every
    attempt fails, ExecutionError is raised chained to the last failure.
    """

    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            logs: List[str] = []
            last_error: Optional[Exception] = None
            for attempt in range(max_retries + 1):
                task = asyncio.current_task()
                if task is not None and task.cancelling():
                    # The executor may have swallowed the cancel; honour it here.
                    raise asyncio.CancelledError()
                try:
                    output = await next_executor(tool_input)
                except ValidationError:
                    raise
                except Exception as e:
                    last_error = e
                    if attempt < max_retries:
                        message = f"Retry attempt {attempt + 1}/{max_retries} after error: {e}"
                        logs.append(message)
                        logger.info(f"[tool] {message} (call_id={tool_input.call_id})")
                        await asyncio.sleep(delay)
                    continue

                if attempt > 0:
                    output.logs[:0] = logs
                    output.add_log(f"Succeeded after {attempt} retries")
                return output

            output = _failed_output(last_error)
            output.logs[:0] = logs
            err = ExecutionError(f"failed after {max_retries} retries: {last_error}", output=output)
            output.error = str(err)
            raise err from last_error

        return executor

    return middleware


def validation_middleware(validator: Callable[[ToolInput], None]) -> Middleware:
    """Run an extra check (raising ValidationError) before the wrapped executor."""

    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            validator(tool_input)
            return await next_executor(tool_input)

        return executor

    return middleware


def metrics_middleware(collector: MetricsCollector, tool_name: str) -> Middleware:
    def middleware(next_executor: Executor) -> Executor:
        async def executor(tool_input: ToolInput) -> ToolOutput:
            start = time.perf_counter()
            try:
                output = await next_executor(tool_input)
            except Exception:
                collector.record(tool_name, time.perf_counter() - start, failed=True)
                raise
            collector.record(tool_name, time.perf_counter() - start, failed=False)
            return output

        return executor

    return middleware
