"""
Provider selection: run configuration -> one concrete BarProvider.

Decision table (first match wins):
  1. data_source names a vendor  -> that vendor
  2. data_source = auto, mode = live -> alpaca (paper or live per use_paper_when_live)
     data_source = auto, otherwise   -> polygon

Construction only; no network I/O happens here.
"""

from datetime import timedelta

from config.loader import AppConfig, DataSource, Mode
from market_core.contracts import Granularity

from data.errors import ConfigurationError
from data.fetcher import BarProvider


def resolve_vendor(mode: Mode, data_source: DataSource) -> DataSource:
    if data_source is not DataSource.AUTO:
        return data_source
    return DataSource.ALPACA if mode is Mode.LIVE else DataSource.POLYGON


def build_alpaca_provider(cfg: AppConfig) -> BarProvider:
    from data.alpaca_fetcher import AlpacaBarProvider, AlpacaPageSource

    if not cfg.alpaca.is_configured:
        raise ConfigurationError(
            "Alpaca API key and secret are required. "
            "Set APCA_API_KEY_ID and APCA_API_SECRET_KEY environment variables."
        )
    source = AlpacaPageSource(
        cfg.alpaca.api_key,
        cfg.alpaca.api_secret,
        feed=cfg.alpaca.feed,
        page_size=cfg.alpaca.page_size,
    )
    return AlpacaBarProvider(
        source,
        paper=cfg.use_paper_when_live,
        request_lag=timedelta(hours=cfg.alpaca.request_lag_hours),
        max_pages=cfg.alpaca.max_pages,
    )


def build_polygon_provider(cfg: AppConfig) -> BarProvider:
    from data.polygon_client import PolygonRestClient
    from data.polygon_fetcher import PolygonBarProvider

    if not cfg.polygon.is_configured:
        raise ConfigurationError("Polygon API key is required. Set POLYGON_API_KEY environment variable.")
    try:
        granularity = Granularity.parse(cfg.polygon.timespan or "day")
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    client = PolygonRestClient(
        cfg.polygon.api_key,
        base_url=cfg.polygon.base_url,
        limit=cfg.polygon.limit,
        timeout=cfg.polygon.timeout_seconds,
    )
    return PolygonBarProvider(client, granularity=granularity)


def select_provider(cfg: AppConfig) -> BarProvider:
    """Instantiate the provider for the vendor resolve_vendor picks."""
    if resolve_vendor(cfg.mode, cfg.data_source) is DataSource.POLYGON:
        return build_polygon_provider(cfg)
    return build_alpaca_provider(cfg)
