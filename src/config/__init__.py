"""
Configuration loader.

Run config: reads config.yaml, validates it against JSON Schema, resolves env vars for secrets.
"""

from config.loader import (
    AlpacaConfig,
    AppConfig,
    DataSource,
    EventsConfig,
    Mode,
    PolygonConfig,
    RunConfigError,
    StorageConfig,
    load_config,
    validate_config,
)

__all__ = [
    "AlpacaConfig",
    "AppConfig",
    "DataSource",
    "EventsConfig",
    "Mode",
    "PolygonConfig",
    "RunConfigError",
    "StorageConfig",
    "load_config",
    "validate_config",
]
