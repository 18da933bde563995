"""Performance telemetry - timing of public lineage operations."""

from .events import PerformanceMetric
from .monitor import PerformanceMonitor, performance_monitor
from .instrumentation import (
    MonitoredContactLoader,
    MonitoredHydrationService,
    MonitoredLineage,
    create_monitored_lineage,
    monitored,
)

__all__ = [
    "PerformanceMetric",
    "PerformanceMonitor",
    "performance_monitor",
    "MonitoredContactLoader",
    "MonitoredHydrationService",
    "MonitoredLineage",
    "create_monitored_lineage",
    "monitored",
]
