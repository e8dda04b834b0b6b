"""
Data pipeline: select a vendor, fetch OHLCV, normalize to UTC Decimal bars, persist.

Depends on market_core.contracts for Bar; no dependency from market_core back to data.
"""

from data.errors import (
    ConfigurationError,
    MalformedResponseError,
    MarketDataError,
    PaginationLimitExceeded,
    TransportError,
)
from data.fetcher import BarPage, BarPageSource, BarProvider, MockBarProvider
from data.price_store import PriceStore
from data.selector import resolve_vendor, select_provider

__all__ = [
    "BarPage",
    "BarPageSource",
    "BarProvider",
    "ConfigurationError",
    "MalformedResponseError",
    "MarketDataError",
    "MockBarProvider",
    "PaginationLimitExceeded",
    "PriceStore",
    "TransportError",
    "resolve_vendor",
    "select_provider",
]
