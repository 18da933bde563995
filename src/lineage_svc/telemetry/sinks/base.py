"""Base sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..events import PerformanceMetric


class MetricSink(ABC):
    """
    Abstract base class for metric sinks.

    Sinks receive batches of metrics and deliver them to a destination
    (console, file, etc.).
    """

    @abstractmethod
    async def send(self, metrics: list[PerformanceMetric]) -> None:
        """Send a batch of metrics to the sink."""
        ...

    async def start(self) -> None:
        """Initialize the sink (called on startup)."""
        pass

    async def stop(self) -> None:
        """Clean up the sink (called on shutdown)."""
        pass
