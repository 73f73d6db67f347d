"""
calculate tool

Arithmetic, probability and simple statistics so the model does not have to do
math in its head.
"""

from __future__ import annotations

import math
import statistics
from typing import Any, Dict, List

from ai_resolver.agent.tools.base import Tool
from ai_resolver.agent.tools.types import ToolInput, ToolOutput
from ai_resolver.errors import ExecutionError

OPERATIONS = [
    "add",
    "subtract",
    "multiply",
    "divide",
    "power",
    "sqrt",
    "percentage",
    "probability_multiply",
    "probability_complement",
    "mean",
    "median",
]


def _exactly(op: str, values: List[float], n: int, hint: str = "") -> None:
    if len(values) != n:
        noun = "value" if n == 1 else "values"
        raise ValueError(f"{op} requires exactly {n} {noun}{hint}")


def _at_least(op: str, values: List[float], n: int) -> None:
    if len(values) < n:
        noun = "value" if n == 1 else "values"
        raise ValueError(f"{op} requires at least {n} {noun}")


def _check_probability(p: float) -> None:
    if p < 0 or p > 1:
        raise ValueError("probability values must be between 0 and 1")


def calculate(operation: str, values: List[float]) -> float:
    """Pure calculation. Raises ValueError on bad arity or domain errors."""
    if operation == "add":
        _at_least(operation, values, 2)
        return math.fsum(values)
    if operation == "subtract":
        _exactly(operation, values, 2)
        return values[0] - values[1]
    if operation == "multiply":
        _at_least(operation, values, 2)
        return math.prod(values)
    if operation == "divide":
        _exactly(operation, values, 2)
        if values[1] == 0:
            raise ValueError("division by zero")
        return values[0] / values[1]
    if operation == "power":
        _exactly(operation, values, 2, " (base, exponent)")
        return math.pow(values[0], values[1])
    if operation == "sqrt":
        _exactly(operation, values, 1)
        if values[0] < 0:
            raise ValueError("cannot take square root of negative number")
        return math.sqrt(values[0])
    if operation == "percentage":
        _exactly(operation, values, 2, " (part, whole)")
        if values[1] == 0:
            raise ValueError("division by zero")
        return values[0] / values[1] * 100
    if operation == "probability_multiply":
        # Joint probability of independent events.
        _at_least(operation, values, 2)
        for v in values:
            _check_probability(v)
        return math.prod(values)
    if operation == "probability_complement":
        _exactly(operation, values, 1)
        _check_probability(values[0])
        return 1 - values[0]
    if operation == "mean":
        _at_least(operation, values, 1)
        return statistics.fmean(values)
    if operation == "median":
        _at_least(operation, values, 1)
        return float(statistics.median(values))
    raise ValueError(f"unknown operation: {operation}")


def _to_float(value: Any, index: int) -> float:
    if isinstance(value, bool):
        raise ValueError(f"invalid value at index {index}: unsupported numeric type bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"invalid value at index {index}: cannot parse string as number") from None
    raise ValueError(f"invalid value at index {index}: unsupported numeric type {type(value).__name__}")


class CalculatorTool(Tool):
    name = "calculate"
    description = (
        "Perform mathematical and statistical calculations including basic arithmetic, "
        "probability calculations, and statistical operations. Returns a numeric result."
    )
    input_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "description": "The calculation to perform: " + ", ".join(OPERATIONS),
                "enum": OPERATIONS,
            },
            "values": {
                "type": "array",
                "description": "The numbers to calculate with (1-2 values for basic operations, any number for mean/median)",
                "items": {"type": "number"},
            },
        },
        "required": ["operation", "values"],
    }

    def run(self, tool_input: ToolInput) -> ToolOutput:
        args = tool_input.arguments or {}
        operation = args.get("operation")
        if not operation:
            raise ExecutionError("operation is required")
        raw_values = args.get("values")
        if not isinstance(raw_values, (list, tuple)):
            raise ExecutionError("values must be an array of numbers")

        try:
            values = [_to_float(v, i) for i, v in enumerate(raw_values)]
            result = calculate(operation, values)
        except ValueError as e:
            output = ToolOutput(data={"operation": operation, "values": list(raw_values), "error": str(e)})
            raise ExecutionError(f"calculation failed: {e}", output=output) from e

        return ToolOutput(data={"operation": operation, "values": values, "result": result})
