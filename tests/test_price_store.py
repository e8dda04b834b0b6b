"""Integration tests for the SQLite price/signal/trade store."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from data.price_store import PriceStore
from market_core.contracts import Bar

from conftest import hourly_bars


def _ts(y: int, m: int, d: int) -> datetime:
    return datetime(y, m, d, 14, 30, 0, tzinfo=timezone.utc)


def _daily(n: int) -> list[Bar]:
    return [
        Bar(_ts(2024, 1, 2) + timedelta(days=i), Decimal("100.10"), Decimal("101.25"), Decimal("99.05"), Decimal(f"{100 + i}.5"), 1_000_000 + i)
        for i in range(n)
    ]


@pytest.fixture
def store(tmp_path: Path) -> PriceStore:
    return PriceStore(tmp_path / "nested" / "prices.db")


def test_requires_path() -> None:
    with pytest.raises(ValueError, match="db_path"):
        PriceStore("")


def test_write_and_get_prices(store: PriceStore) -> None:
    bars = _daily(3)
    assert store.write_prices("SPY", bars) == 3
    out = store.get_prices("SPY")
    assert out == bars
    assert out[0].high == Decimal("101.25")
    assert out[0].timestamp.tzinfo is not None


def test_prices_returned_ascending(store: PriceStore) -> None:
    bars = _daily(4)
    store.write_prices("SPY", list(reversed(bars)))
    assert [b.timestamp for b in store.get_prices("SPY")] == [b.timestamp for b in bars]


def test_date_range_filter(store: PriceStore) -> None:
    store.write_prices("SPY", _daily(10))
    out = store.get_prices("SPY", since=_ts(2024, 1, 4), until=_ts(2024, 1, 6))
    assert [b.timestamp.day for b in out] == [4, 5, 6]


def test_symbol_isolation_and_count(store: PriceStore) -> None:
    store.write_prices("SPY", _daily(5))
    store.write_prices("AAPL", hourly_bars([10, 20]))
    assert store.count_prices("SPY") == 5
    assert store.count_prices("AAPL") == 2
    assert store.count_prices("MSFT") == 0


def test_upsert_does_not_duplicate(store: PriceStore) -> None:
    bars = _daily(2)
    store.write_prices("SPY", bars)
    store.write_prices("SPY", bars)
    assert store.count_prices("SPY") == 2


def test_limit(store: PriceStore) -> None:
    store.write_prices("SPY", _daily(5))
    assert len(store.get_prices("SPY", limit=2)) == 2


def test_signals_round_trip(store: PriceStore) -> None:
    store.insert_signal("SPY", _ts(2024, 1, 3), "sma_cross", "BUY", "fast above slow")
    store.insert_signal("SPY", _ts(2024, 1, 2), "rsi", "SELL")
    store.insert_signal("AAPL", _ts(2024, 1, 2), "rsi", "HOLD")

    rows = store.get_signals("SPY")
    assert [(r.strategy, r.signal) for r in rows] == [("rsi", "SELL"), ("sma_cross", "BUY")]
    assert rows[1].reason == "fast above slow"
    assert store.get_signals("SPY", since=_ts(2024, 1, 3))[0].strategy == "sma_cross"


def test_trades_total_value(store: PriceStore) -> None:
    trade = store.insert_trade("SPY", _ts(2024, 1, 2), _ts(2024, 1, 3), "buy", 10, Decimal("101.25"))
    assert trade.side == "BUY"
    assert trade.total_value == Decimal("1012.50")

    rows = store.get_trades("SPY")
    assert rows == [trade]


def test_trades_filtered_by_bar_date(store: PriceStore) -> None:
    store.insert_trade("SPY", _ts(2024, 1, 2), _ts(2024, 1, 3), "BUY", 1, Decimal("100"))
    store.insert_trade("SPY", _ts(2024, 1, 9), _ts(2024, 1, 10), "SELL", 1, Decimal("105"))
    rows = store.get_trades("SPY", until=_ts(2024, 1, 5))
    assert [r.side for r in rows] == ["BUY"]
