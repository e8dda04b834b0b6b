"""
Acquisition contract: every vendor provider turns (symbol, days of history)
into an ascending list of normalized Bars. Sync; one call at a time per provider.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from market_core.contracts import Bar, Granularity


@dataclass
class BarPage:
    """One page of normalized bars and the vendor's continuation token, if any."""

    bars: list[Bar]
    next_page_token: str | None = None


class BarPageSource(Protocol):
    """Paginated bar request against one vendor. Injected so tests can fake it."""

    def request_page(
        self,
        symbol: str,
        granularity: Granularity,
        start: datetime,
        end: datetime,
        page_token: str | None = None,
    ) -> BarPage:
        ...


class BarProvider(Protocol):
    """Protocol for vendor providers (Alpaca, Polygon, ...)."""

    name: str

    def fetch_bars(self, symbol: str, days_history: int) -> list[Bar]:
        """Fetch bars for the trailing window; ascending by timestamp, possibly empty."""
        ...


def check_days_history(days_history: int) -> None:
    if days_history <= 0:
        raise ValueError(f"days_history must be positive, got {days_history}")


class MockBarProvider:
    """Returns no bars; for tests and when no API is configured."""

    name = "mock"

    def fetch_bars(self, symbol: str, days_history: int) -> list[Bar]:
        check_days_history(days_history)
        return []
