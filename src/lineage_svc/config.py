"""Configuration for the lineage service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

# Environment variable naming a YAML or JSON config file
CONFIG_ENV_VAR = "LINEAGE_CONFIG"

DEFAULT_CONTACT_TYPES = (
    "contact",
    "person",
    "clinic",
    "health_center",
    "district_hospital",
)


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8060
    workers: int = 1
    reload: bool = False


@dataclass
class TelemetryConfig:
    """Performance telemetry configuration."""
    enabled: bool = True
    sink_type: str = "none"  # none | console | file
    sink_config: dict[str, Any] = field(default_factory=dict)

    # Upper bound on retained metrics (oldest dropped first)
    max_metrics: int = 10000


@dataclass
class DataSourceConfig:
    """Static data source configuration."""
    # Path to canned documents (YAML or JSON)
    documents_file: str | None = None

    # Stop walking the parent chain after this many ancestors
    max_lineage_depth: int = 32


@dataclass
class HydrationConfig:
    """Hydration configuration."""
    # Contact type names recognised on top of DEFAULT_CONTACT_TYPES
    contact_types: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Main configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    datasource: DataSourceConfig = field(default_factory=DataSourceConfig)
    hydration: HydrationConfig = field(default_factory=HydrationConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            server=ServerConfig(**data.get("server", {})),
            telemetry=TelemetryConfig(**data.get("telemetry", {})),
            datasource=DataSourceConfig(**data.get("datasource", {})),
            hydration=HydrationConfig(**data.get("hydration", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | None = None) -> Config:
        """
        Load config from an explicit path, the LINEAGE_CONFIG environment
        variable, or fall back to defaults.
        """
        path = path or os.environ.get(CONFIG_ENV_VAR)
        if not path:
            return cls()
        if path.endswith((".yaml", ".yml")):
            return cls.from_yaml(path)
        return cls.from_json(path)
