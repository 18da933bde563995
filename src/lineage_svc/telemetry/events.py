"""Performance metric types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class PerformanceMetric:
    """
    A single timed call of a public operation.

    Captures everything needed for:
    - Latency tracking ("how long did hydration take")
    - Reliability ("how often does get_docs fail")
    - Debugging ("what went wrong")
    """
    # Public operation name, e.g. "hydrate_doc"
    operation: str

    # Start-to-finish wall time
    duration_ms: float

    # False when the operation raised
    success: bool

    # str() of the raised exception
    error: str | None = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "operation": self.operation,
            "duration_ms": self.duration_ms,
            "success": self.success,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }
