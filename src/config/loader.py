"""
Config loader: YAML file -> frozen dataclass tree, validated against JSON Schema.

API secrets resolved from environment variables
(APCA_API_KEY_ID, APCA_API_SECRET_KEY, POLYGON_API_KEY).
Config file holds only non-secret values.

Schema: docs/config/run_config.schema.json
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema
import yaml

POLYGON_TIMESPANS = ("minute", "hour", "day", "week", "month")


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml; fall back to CWD."""
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


DEFAULT_SCHEMA_PATH = _find_project_root() / "docs" / "config" / "run_config.schema.json"


class RunConfigError(Exception):
    """Raised when run config loading or validation fails."""


class Mode(str, Enum):
    LIVE = "live"
    BACKTEST = "backtest"
    AUTO = "auto"


class DataSource(str, Enum):
    ALPACA = "alpaca"
    POLYGON = "polygon"
    AUTO = "auto"


@dataclass(frozen=True)
class AlpacaConfig:
    api_key: str = ""
    api_secret: str = ""
    feed: str = "iex"
    page_size: int = 10_000
    request_lag_hours: float = 1.0
    max_pages: int = 1000

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip()) and bool(self.api_secret.strip())


@dataclass(frozen=True)
class PolygonConfig:
    api_key: str = ""
    timespan: str = "day"
    base_url: str = "https://api.polygon.io"
    limit: int = 50_000
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = ""


@dataclass(frozen=True)
class EventsConfig:
    structured: bool = True


@dataclass(frozen=True)
class AppConfig:
    mode: Mode = Mode.AUTO
    data_source: DataSource = DataSource.AUTO
    days_history: int = 180
    symbols: tuple[str, ...] = ()
    min_bars: int = 30
    persist_price_data: bool = False
    use_paper_when_live: bool = True
    alpaca: AlpacaConfig = field(default_factory=AlpacaConfig)
    polygon: PolygonConfig = field(default_factory=PolygonConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    events: EventsConfig = field(default_factory=EventsConfig)


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise RunConfigError(f"Run config validation failed: {exc.message}") from exc


def _enum_value(enum_cls: type[Enum], raw: Any, default: Enum) -> Any:
    if raw is None:
        return default
    return enum_cls(str(raw).strip().lower())


def load_config(
    path: str | Path = "config.yaml",
    *,
    schema_path: str | Path | None = None,
) -> AppConfig:
    """
    Load run configuration from a YAML file.

    Secrets are resolved from environment variables:
      - APCA_API_KEY_ID / APCA_API_SECRET_KEY (Alpaca's standard names)
      - POLYGON_API_KEY
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise RunConfigError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    _validate_schema(raw, Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH)

    a_raw = raw.get("alpaca", {})
    alpaca_cfg = AlpacaConfig(
        api_key=os.environ.get("APCA_API_KEY_ID", ""),
        api_secret=os.environ.get("APCA_API_SECRET_KEY", ""),
        feed=str(a_raw.get("feed", "iex")),
        page_size=int(a_raw.get("page_size", 10_000)),
        request_lag_hours=float(a_raw.get("request_lag_hours", 1.0)),
        max_pages=int(a_raw.get("max_pages", 1000)),
    )

    p_raw = raw.get("polygon", {})
    polygon_cfg = PolygonConfig(
        api_key=os.environ.get("POLYGON_API_KEY", ""),
        timespan=str(p_raw.get("timespan", "day")).lower(),
        base_url=str(p_raw.get("base_url", "https://api.polygon.io")),
        limit=int(p_raw.get("limit", 50_000)),
        timeout_seconds=float(p_raw.get("timeout_seconds", 30.0)),
    )

    s_raw = raw.get("storage", {})
    e_raw = raw.get("events", {})

    return AppConfig(
        mode=_enum_value(Mode, raw.get("mode"), Mode.AUTO),
        data_source=_enum_value(DataSource, raw.get("data_source"), DataSource.AUTO),
        days_history=int(raw.get("days_history", 180)),
        symbols=tuple(str(s).upper() for s in raw.get("symbols", [])),
        min_bars=int(raw.get("min_bars", 30)),
        persist_price_data=bool(raw.get("persist_price_data", False)),
        use_paper_when_live=bool(raw.get("use_paper_when_live", True)),
        alpaca=alpaca_cfg,
        polygon=polygon_cfg,
        storage=StorageConfig(db_path=str(s_raw.get("db_path", ""))),
        events=EventsConfig(structured=bool(e_raw.get("structured", True))),
    )


def validate_config(cfg: AppConfig) -> list[str]:
    """Return human-readable problems with *cfg*; empty list means usable."""
    from data.selector import resolve_vendor

    errors: list[str] = []
    if cfg.days_history <= 0:
        errors.append("days_history must be positive")
    if cfg.polygon.timespan not in POLYGON_TIMESPANS:
        errors.append(
            f"polygon.timespan '{cfg.polygon.timespan}' is not one of {list(POLYGON_TIMESPANS)}"
        )

    vendor = resolve_vendor(cfg.mode, cfg.data_source)
    if vendor is DataSource.POLYGON and not cfg.polygon.is_configured:
        errors.append("Polygon API key is required for the selected configuration")
    needs_alpaca = vendor is DataSource.ALPACA or cfg.mode is Mode.LIVE
    if needs_alpaca and not cfg.alpaca.is_configured:
        errors.append("Alpaca API credentials are required for the selected configuration")

    if cfg.persist_price_data and not cfg.storage.db_path:
        errors.append("storage.db_path is required when persist_price_data is true")
    return errors
