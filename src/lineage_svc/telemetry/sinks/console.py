"""Console sink for development/debugging."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass

from ..events import PerformanceMetric
from .base import MetricSink


@dataclass
class ConsoleSink(MetricSink):
    """Sink that writes metrics to stdout or stderr."""
    stream: str = "stdout"  # stdout | stderr

    format: str = "json"  # json | compact | pretty

    prefix: str = "[PERF] "

    # Compact lines for calls at or above this duration are flagged SLOW (0 = off)
    slow_ms: float = 0.0

    async def send(self, metrics: list[PerformanceMetric]) -> None:
        out = sys.stdout if self.stream == "stdout" else sys.stderr

        for metric in metrics:
            print(f"{self.prefix}{self._format_metric(metric)}", file=out)

    def _format_metric(self, metric: PerformanceMetric) -> str:
        if self.format == "json":
            return json.dumps(metric.to_dict(), default=str)
        elif self.format == "compact":
            status = "ok" if metric.success else f"error: {metric.error}"
            line = f"{metric.timestamp.isoformat()} {metric.operation} {metric.duration_ms:.1f}ms {status}"
            if self.slow_ms and metric.duration_ms >= self.slow_ms:
                line += " SLOW"
            return line
        else:  # pretty
            return json.dumps(metric.to_dict(), indent=2, default=str)
