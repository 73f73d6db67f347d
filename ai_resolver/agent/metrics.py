"""
Per-tool execution metrics.

Counters are updated from the metrics middleware, which may run on many
concurrent invocations (and from worker threads), so every update and read
goes through one lock.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ToolMetrics:
    execution_count: int
    execution_time: float
    error_count: int
    last_execution_time: Optional[float]

    @property
    def average_execution_time(self) -> float:
        return self.execution_time / self.execution_count if self.execution_count else 0.0

    @property
    def error_rate(self) -> float:
        return self.error_count / self.execution_count if self.execution_count else 0.0


class MetricsCollector:
    def __init__(self):
        self._lock = threading.Lock()
        self._count: Dict[str, int] = defaultdict(int)
        self._time: Dict[str, float] = defaultdict(float)
        self._errors: Dict[str, int] = defaultdict(int)
        self._last: Dict[str, float] = {}

    def record(self, tool_name: str, duration: float, failed: bool) -> None:
        with self._lock:
            self._count[tool_name] += 1
            self._time[tool_name] += duration
            self._last[tool_name] = time.time()
            if failed:
                self._errors[tool_name] += 1

    def get(self, tool_name: str) -> ToolMetrics:
        with self._lock:
            return ToolMetrics(
                execution_count=self._count.get(tool_name, 0),
                execution_time=self._time.get(tool_name, 0.0),
                error_count=self._errors.get(tool_name, 0),
                last_execution_time=self._last.get(tool_name),
            )

    def get_average_execution_time(self, tool_name: str) -> float:
        return self.get(tool_name).average_execution_time

    def get_error_rate(self, tool_name: str) -> float:
        return self.get(tool_name).error_rate

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            names = list(self._count)
        out = {}
        for name in names:
            m = self.get(name)
            out[name] = {
                "execution_count": m.execution_count,
                "execution_time": m.execution_time,
                "error_count": m.error_count,
                "average_execution_time": m.average_execution_time,
                "error_rate": m.error_rate,
            }
        return out
