"""Metric sinks - destinations for performance metrics."""

from __future__ import annotations

import logging

from ...config import TelemetryConfig
from .base import MetricSink
from .console import ConsoleSink
from .file import FileSink


logger = logging.getLogger(__name__)


def create_sink(config: TelemetryConfig) -> MetricSink | None:
    """Create the sink named by the telemetry config, or None."""
    sink_type = config.sink_type
    sink_config = config.sink_config

    if sink_type == "console":
        return ConsoleSink(**sink_config)
    if sink_type == "file":
        return FileSink(**sink_config)
    if sink_type != "none":
        logger.warning(f"Unknown metric sink type '{sink_type}', metrics stay in memory")
    return None


__all__ = [
    "MetricSink",
    "ConsoleSink",
    "FileSink",
    "create_sink",
]
