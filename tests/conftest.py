"""Pytest fixtures: bar builders and a scripted page source for deterministic tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from data.fetcher import BarPage
from market_core.contracts import Bar, Granularity

NOW = datetime(2024, 3, 1, 15, 0, 0, tzinfo=timezone.utc)


def _ts(year: int, month: int, day: int, hour: int = 14, minute: int = 30) -> datetime:
    return datetime(year, month, day, hour, minute, 0, tzinfo=timezone.utc)


def make_bar(ts: datetime, volume: int, close: str = "100.50") -> Bar:
    return Bar(ts, Decimal("100.00"), Decimal("101.00"), Decimal("99.00"), Decimal(close), volume)


def hourly_bars(volumes: list[int], start: datetime | None = None) -> list[Bar]:
    start = start or _ts(2024, 1, 2)
    return [make_bar(start + timedelta(hours=i), v) for i, v in enumerate(volumes)]


class ScriptedPageSource:
    """Returns the given pages in order and records every request."""

    def __init__(self, pages: list[BarPage]) -> None:
        self._pages = list(pages)
        self.calls: list[dict] = []

    def request_page(
        self,
        symbol: str,
        granularity: Granularity,
        start: datetime,
        end: datetime,
        page_token: str | None = None,
    ) -> BarPage:
        self.calls.append(
            {"symbol": symbol, "granularity": granularity, "start": start, "end": end, "page_token": page_token}
        )
        return self._pages.pop(0)


class EndlessPageSource:
    """Always claims there is another page."""

    def __init__(self) -> None:
        self.calls = 0

    def request_page(self, symbol, granularity, start, end, page_token=None) -> BarPage:
        self.calls += 1
        bar = make_bar(_ts(2024, 1, 2) + timedelta(hours=self.calls), 1_000)
        return BarPage(bars=[bar], next_page_token=f"tok-{self.calls}")


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def symbol() -> str:
    return "SPY"
