"""Tests for provider selection: the decision table and provider construction."""

from unittest.mock import MagicMock, patch

import pytest

from config import AlpacaConfig, AppConfig, DataSource, Mode, PolygonConfig
from data.errors import ConfigurationError
from data.polygon_fetcher import PolygonBarProvider
from data.selector import resolve_vendor, select_provider
from market_core.contracts import Granularity


@pytest.mark.parametrize(
    "mode, source, expected",
    [
        (Mode.LIVE, DataSource.POLYGON, DataSource.POLYGON),
        (Mode.BACKTEST, DataSource.ALPACA, DataSource.ALPACA),
        (Mode.LIVE, DataSource.AUTO, DataSource.ALPACA),
        (Mode.BACKTEST, DataSource.AUTO, DataSource.POLYGON),
        (Mode.AUTO, DataSource.AUTO, DataSource.POLYGON),
        (Mode.AUTO, DataSource.ALPACA, DataSource.ALPACA),
    ],
)
def test_resolve_vendor(mode: Mode, source: DataSource, expected: DataSource) -> None:
    assert resolve_vendor(mode, source) is expected


def test_resolve_vendor_is_total() -> None:
    for mode in Mode:
        for source in DataSource:
            assert resolve_vendor(mode, source) in (DataSource.ALPACA, DataSource.POLYGON)


def _cfg(mode: Mode, source: DataSource, **kw) -> AppConfig:
    return AppConfig(
        mode=mode,
        data_source=source,
        alpaca=AlpacaConfig(api_key="key", api_secret="secret", request_lag_hours=2, max_pages=7),
        polygon=PolygonConfig(api_key="poly", timespan="hour"),
        **kw,
    )


def test_explicit_polygon_beats_live_mode() -> None:
    provider = select_provider(_cfg(Mode.LIVE, DataSource.POLYGON))
    assert isinstance(provider, PolygonBarProvider)
    assert provider.granularity is Granularity.HOUR


def test_backtest_auto_selects_polygon() -> None:
    assert select_provider(_cfg(Mode.BACKTEST, DataSource.AUTO)).name == "polygon"


def test_live_auto_selects_alpaca() -> None:
    with patch("data.alpaca_fetcher.AlpacaPageSource") as source_cls:
        source_cls.return_value = MagicMock()
        provider = select_provider(_cfg(Mode.LIVE, DataSource.AUTO, use_paper_when_live=False))

    assert provider.name == "alpaca"
    assert provider.environment == "live"
    assert provider.max_pages == 7
    assert provider.request_lag.total_seconds() == 7200
    source_cls.assert_called_once_with("key", "secret", feed="iex", page_size=10_000)


def test_missing_polygon_key_is_configuration_error() -> None:
    cfg = AppConfig(mode=Mode.BACKTEST, data_source=DataSource.AUTO)
    with pytest.raises(ConfigurationError, match="Polygon"):
        select_provider(cfg)


def test_missing_alpaca_keys_is_configuration_error() -> None:
    cfg = AppConfig(mode=Mode.LIVE, data_source=DataSource.AUTO)
    with pytest.raises(ConfigurationError, match="Alpaca"):
        select_provider(cfg)


def test_bad_polygon_timespan_is_configuration_error() -> None:
    cfg = AppConfig(data_source=DataSource.POLYGON, polygon=PolygonConfig(api_key="k", timespan="decade"))
    with pytest.raises(ConfigurationError, match="Unsupported granularity"):
        select_provider(cfg)
