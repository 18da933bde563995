"""File sink for performance metrics."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from ..events import PerformanceMetric
from .base import MetricSink


@dataclass
class FileSink(MetricSink):
    """
    Sink that appends metrics to a file (JSONL format).

    Each metric is written as a single JSON line for easy parsing.
    """
    path: str
    encoding: str = "utf-8"

    # Internal state
    _file: TextIO | None = field(default=None, init=False)

    async def start(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding=self.encoding)

    async def stop(self) -> None:
        if self._file:
            self._file.close()
            self._file = None

    async def send(self, metrics: list[PerformanceMetric]) -> None:
        if not self._file:
            await self.start()

        for metric in metrics:
            self._file.write(json.dumps(metric.to_dict(), default=str) + "\n")

        self._file.flush()
