"""Performance monitor - append-only log of timed operations."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field

from .events import PerformanceMetric
from .sinks.base import MetricSink


logger = logging.getLogger(__name__)


@dataclass
class PerformanceMonitor:
    """
    Records operation timings and derives per-operation aggregates.

    Metrics are kept in memory (bounded, oldest dropped first). Delivery to
    sinks happens off the hot path: `record` only appends and enqueues, and
    a background loop started by `start()` hands queued metrics to the
    sinks. A failing sink is logged and counted; it never affects the caller
    of `record`.
    """
    # Maximum retained metrics
    max_metrics: int = 10000

    # Maximum metrics waiting for sink delivery; overflow is dropped
    max_queue_size: int = 10000

    # Internal state
    _metrics: deque[PerformanceMetric] = field(default_factory=deque, init=False)
    _sinks: list[MetricSink] = field(default_factory=list, init=False)
    _queue: asyncio.Queue | None = field(default=None, init=False)
    _task: asyncio.Task | None = field(default=None, init=False)
    _stats: dict = field(default_factory=dict, init=False)

    def __post_init__(self):
        self._metrics = deque(maxlen=self.max_metrics)
        self._stats = {
            "recorded": 0,
            "delivered": 0,
            "dropped": 0,
            "sink_errors": 0,
        }

    def add_sink(self, sink: MetricSink) -> None:
        """Forward every recorded metric to `sink`."""
        self._sinks.append(sink)

    async def start(self) -> None:
        """Start the sinks and the background delivery loop."""
        if self._task is not None:
            return
        self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        for sink in self._sinks:
            await sink.start()
        self._task = asyncio.create_task(self.process_loop())
        logger.info(f"Performance monitor started (sinks={len(self._sinks)})")

    async def stop(self) -> None:
        """Stop the delivery loop, drain pending metrics and stop the sinks."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._queue is not None:
            pending = []
            while not self._queue.empty():
                pending.append(self._queue.get_nowait())
            if pending:
                await self._deliver(pending)
            self._queue = None

        for sink in self._sinks:
            await sink.stop()
        logger.info(f"Performance monitor stopped. Stats: {self.stats}")

    def record(
        self,
        operation: str,
        duration_ms: float,
        success: bool,
        error: str | None = None,
    ) -> PerformanceMetric:
        """Append a metric and queue it for the sinks (non-blocking)."""
        metric = PerformanceMetric(
            operation=operation,
            duration_ms=duration_ms,
            success=success,
            error=error,
        )
        self._metrics.append(metric)
        self._stats["recorded"] += 1

        if self._sinks:
            self._enqueue(metric)

        return metric

    def _enqueue(self, metric: PerformanceMetric) -> None:
        if self._queue is None:
            logger.warning("Performance monitor not started, metric not sent to sinks")
            self._stats["dropped"] += 1
            return

        try:
            self._queue.put_nowait(metric)
        except asyncio.QueueFull:
            self._stats["dropped"] += 1

    async def process_loop(self) -> None:
        """
        Deliver queued metrics to the sinks until cancelled.

        Run as a background task; `start()` does this.
        """
        if self._queue is None:
            raise RuntimeError("Monitor not started")

        while True:
            try:
                metric = await self._queue.get()
                await self._deliver([metric])
                self._queue.task_done()
            except asyncio.CancelledError:
                break

    async def flush(self) -> None:
        """Wait until every queued metric has been delivered."""
        if self._queue is not None and self._task is not None:
            await self._queue.join()

    async def _deliver(self, metrics: list[PerformanceMetric]) -> None:
        for sink in self._sinks:
            try:
                await sink.send(metrics)
            except Exception as e:
                logger.error(f"Metric sink error: {e}")
                self._stats["sink_errors"] += 1
        self._stats["delivered"] += len(metrics)

    @property
    def metrics(self) -> list[PerformanceMetric]:
        """All retained metrics, oldest first."""
        return list(self._metrics)

    def get_metrics(self, operation: str | None = None) -> list[PerformanceMetric]:
        """Retained metrics, optionally for a single operation."""
        if operation is None:
            return self.metrics
        return [m for m in self._metrics if m.operation == operation]

    def get_average_duration(self, operation: str) -> float:
        """Mean duration in ms; 0.0 when nothing was recorded."""
        samples = self.get_metrics(operation)
        if not samples:
            return 0.0
        return sum(m.duration_ms for m in samples) / len(samples)

    def get_success_rate(self, operation: str) -> float:
        """Fraction of successful calls; 0.0 when nothing was recorded."""
        samples = self.get_metrics(operation)
        if not samples:
            return 0.0
        return sum(1 for m in samples if m.success) / len(samples)

    def operations(self) -> list[str]:
        """Operation names seen so far, in first-seen order."""
        return list(dict.fromkeys(m.operation for m in self._metrics))

    def summary(self) -> dict[str, dict[str, float]]:
        """Per-operation call count, average duration and success rate."""
        return {
            op: {
                "count": len(self.get_metrics(op)),
                "average_duration_ms": self.get_average_duration(op),
                "success_rate": self.get_success_rate(op),
            }
            for op in self.operations()
        }

    def clear(self) -> None:
        """Drop all retained metrics."""
        self._metrics.clear()

    @property
    def queue_depth(self) -> int:
        """Metrics waiting for sink delivery."""
        return self._queue.qsize() if self._queue else 0

    @property
    def stats(self) -> dict:
        """Get monitor statistics."""
        return {
            **self._stats,
            "retained": len(self._metrics),
            "queue_depth": self.queue_depth,
            "sinks": len(self._sinks),
        }


# Process-wide default monitor
performance_monitor = PerformanceMonitor()
