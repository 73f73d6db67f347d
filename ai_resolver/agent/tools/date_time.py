"""
datetime tool

Date parsing and timestamp arithmetic. All timestamps are Unix seconds and all
calendar fields are reported in UTC.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from ai_resolver.agent.tools.base import Tool
from ai_resolver.agent.tools.types import ToolInput, ToolOutput
from ai_resolver.errors import ExecutionError

OPERATIONS = [
    "parse",
    "compare",
    "time_until",
    "time_since",
    "is_before",
    "is_after",
    "current_timestamp",
    "format",
]

# Tried in order after ISO 8601. US month/day wins over day/month.
DATE_FORMATS = [
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S %Z",
    "%a, %d %b %Y %H:%M:%S %z",
    "%d %b %y %H:%M %Z",
    "%d %b %y %H:%M %z",
    "%a %b %d %H:%M:%S %Y",
    "%a %b %d %H:%M:%S %Z %Y",
]


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero (-90 // 60 would give -2)."""
    q = abs(a) // b
    return q if a >= 0 else -q


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _rfc3339(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_date(value: str) -> Tuple[datetime, str]:
    """
    Parse a date string in one of the common formats.

    Returns:
        (aware datetime, name of the layout that matched)
    """
    value = value.strip()
    # Bare digits would otherwise be read as a compact ISO date (YYYYMMDD...).
    if value.lstrip("-").isdigit():
        return datetime.fromtimestamp(int(value), tz=timezone.utc), "unix_timestamp"

    try:
        return _utc(datetime.fromisoformat(value)), "iso8601"
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return _utc(datetime.strptime(value, fmt)), fmt
        except ValueError:
            continue

    raise ValueError(f"unable to parse date: {value!r}")


def _timestamp(args: Dict[str, Any], key: str) -> int:
    value = args.get(key)
    if value is None:
        raise ValueError(f"{key} is required")
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp type: {type(value).__name__}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"invalid timestamp format: {value!r}") from None
    raise ValueError(f"invalid timestamp type: {type(value).__name__}")


class DateTimeTool(Tool):
    name = "datetime"
    description = (
        "Perform date and time calculations including parsing dates, comparing timestamps, "
        "calculating time differences, and checking if events have occurred. "
        "Works with Unix timestamps (seconds)."
    )
    input_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "description": "The operation to perform: " + ", ".join(OPERATIONS),
                "enum": OPERATIONS,
            },
            "timestamp": {
                "type": "integer",
                "description": "Unix timestamp in seconds (for operations that need a single timestamp)",
            },
            "timestamp1": {
                "type": "integer",
                "description": "First Unix timestamp in seconds (for comparison operations)",
            },
            "timestamp2": {
                "type": "integer",
                "description": "Second Unix timestamp in seconds (for comparison operations)",
            },
            "date_string": {
                "type": "string",
                "description": "Date string to parse (formats: RFC3339, 2006-01-02, 2006-01-02T15:04:05)",
            },
        },
        "required": ["operation"],
    }

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        super().__init__()
        self._clock = clock or time.time

    def run(self, tool_input: ToolInput) -> ToolOutput:
        args = tool_input.arguments or {}
        operation = args.get("operation")
        if not operation:
            raise ExecutionError("operation is required")
        try:
            data = self.perform(operation, args)
        except ValueError as e:
            output = ToolOutput(data={"operation": operation, "error": str(e)})
            raise ExecutionError(f"datetime operation failed: {e}", output=output) from e
        return ToolOutput(data=data)

    def perform(self, operation: str, args: Dict[str, Any]) -> Dict[str, Any]:
        now = int(self._clock())

        if operation == "current_timestamp":
            return {
                "timestamp": now,
                "rfc3339": _rfc3339(datetime.fromtimestamp(now, tz=timezone.utc)),
                "description": "Current Unix timestamp in seconds",
            }

        if operation == "parse":
            date_string = args.get("date_string")
            if not date_string:
                raise ValueError("date_string is required for parse operation")
            parsed, layout = parse_date(date_string)
            return {
                "timestamp": int(parsed.timestamp()),
                "rfc3339": _rfc3339(parsed),
                "layout": layout,
                "year": parsed.year,
                "month": parsed.month,
                "day": parsed.day,
                "hour": parsed.hour,
                "minute": parsed.minute,
            }

        if operation == "format":
            ts = _timestamp(args, "timestamp")
            dt = datetime.fromtimestamp(ts, tz=timezone.utc)
            return {
                "timestamp": ts,
                "rfc3339": _rfc3339(dt),
                "date": dt.strftime("%Y-%m-%d"),
                "time": dt.strftime("%H:%M:%S"),
                "datetime": dt.strftime("%Y-%m-%d %H:%M:%S"),
                "year": dt.year,
                "month": dt.month,
                "day": dt.day,
                "hour": dt.hour,
                "minute": dt.minute,
                "second": dt.second,
                "day_of_week": dt.strftime("%A"),
            }

        if operation == "compare":
            ts1 = _timestamp(args, "timestamp1")
            ts2 = _timestamp(args, "timestamp2")
            diff = ts1 - ts2
            return {
                "timestamp1": ts1,
                "timestamp2": ts2,
                "difference_seconds": diff,
                "difference_minutes": _div(diff, 60),
                "difference_hours": _div(diff, 3600),
                "difference_days": _div(diff, 86400),
                "timestamp1_before": ts1 < ts2,
                "timestamp1_after": ts1 > ts2,
                "equal": ts1 == ts2,
            }

        if operation == "time_until":
            ts = _timestamp(args, "timestamp")
            diff = ts - now
            return {
                "target_timestamp": ts,
                "current_timestamp": now,
                "seconds_until": diff,
                "minutes_until": _div(diff, 60),
                "hours_until": _div(diff, 3600),
                "days_until": _div(diff, 86400),
                "has_passed": diff < 0,
                "is_future": diff > 0,
            }

        if operation == "time_since":
            ts = _timestamp(args, "timestamp")
            diff = now - ts
            return {
                "target_timestamp": ts,
                "current_timestamp": now,
                "seconds_since": diff,
                "minutes_since": _div(diff, 60),
                "hours_since": _div(diff, 3600),
                "days_since": _div(diff, 86400),
                "is_past": diff > 0,
                "is_future": diff < 0,
            }

        if operation == "is_before":
            ts = _timestamp(args, "timestamp")
            return {
                "current_timestamp": now,
                "target_timestamp": ts,
                "is_before": now < ts,
                "is_after": not now < ts,
            }

        if operation == "is_after":
            ts = _timestamp(args, "timestamp")
            return {
                "current_timestamp": now,
                "target_timestamp": ts,
                "is_after": now > ts,
                "is_before": not now > ts,
            }

        raise ValueError(f"unknown operation: {operation}")
