"""
Persist prices, signals and trades (SQLite). Timestamps in UTC.

The database path is always supplied by the caller (storage.db_path).
Decimal prices are stored as TEXT so they round-trip exactly.
"""

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from market_core.contracts import Bar, to_utc


@dataclass(frozen=True)
class SignalRow:
    symbol: str
    timestamp: datetime
    strategy: str
    signal: str
    reason: str


@dataclass(frozen=True)
class TradeRow:
    symbol: str
    signal_timestamp: datetime
    bar_date: datetime
    side: str
    quantity: int
    price: Decimal
    total_value: Decimal


def _iso(ts: datetime) -> str:
    return to_utc(ts).isoformat()


def _parse_ts(raw: str) -> datetime:
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _range_clause(column: str, since: datetime | None, until: datetime | None, params: list) -> str:
    q = ""
    if since is not None:
        q += f" AND {column} >= ?"
        params.append(_iso(since))
    if until is not None:
        q += f" AND {column} <= ?"
        params.append(_iso(until))
    return q


class PriceStore:
    """SQLite-backed storage for the acquisition layer's consumers. One file per path."""

    def __init__(self, path: str | Path) -> None:
        if not str(path):
            raise ValueError("PriceStore requires a database path (storage.db_path).")
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._path

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self._path))

    def _init_schema(self) -> None:
        with self._conn() as c:
            c.executescript(
                """
                CREATE TABLE IF NOT EXISTS prices (
                    symbol TEXT NOT NULL,
                    ts_utc TEXT NOT NULL,
                    open TEXT NOT NULL,
                    high TEXT NOT NULL,
                    low TEXT NOT NULL,
                    close TEXT NOT NULL,
                    volume INTEGER NOT NULL,
                    PRIMARY KEY (symbol, ts_utc)
                );
                CREATE TABLE IF NOT EXISTS signals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    ts_utc TEXT NOT NULL,
                    strategy TEXT NOT NULL,
                    signal TEXT NOT NULL,
                    reason TEXT NOT NULL DEFAULT ''
                );
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    signal_ts_utc TEXT NOT NULL,
                    bar_date TEXT NOT NULL,
                    side TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    price TEXT NOT NULL,
                    total_value TEXT NOT NULL
                );
                """
            )

    # ---------- prices ----------

    def write_prices(self, symbol: str, bars: Sequence[Bar]) -> int:
        """Upsert bars (by symbol, ts_utc). Returns the number of rows written."""
        with self._conn() as c:
            c.executemany(
                """
                INSERT OR REPLACE INTO prices (symbol, ts_utc, open, high, low, close, volume)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (symbol, _iso(b.timestamp), str(b.open), str(b.high), str(b.low), str(b.close), b.volume)
                    for b in bars
                ],
            )
        return len(bars)

    def get_prices(
        self,
        symbol: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[Bar]:
        """Return bars in ascending time order. All timestamps in UTC."""
        params: list = [symbol]
        q = "SELECT ts_utc, open, high, low, close, volume FROM prices WHERE symbol = ?"
        q += _range_clause("ts_utc", since, until, params)
        q += " ORDER BY ts_utc ASC"
        if limit is not None:
            q += " LIMIT ?"
            params.append(limit)
        with self._conn() as c:
            rows = c.execute(q, params).fetchall()
        return [
            Bar(
                timestamp=_parse_ts(ts),
                open=Decimal(o),
                high=Decimal(h),
                low=Decimal(l),
                close=Decimal(cl),
                volume=vol,
            )
            for ts, o, h, l, cl, vol in rows
        ]

    def count_prices(self, symbol: str) -> int:
        with self._conn() as c:
            row = c.execute("SELECT COUNT(*) FROM prices WHERE symbol = ?", (symbol,)).fetchone()
        return row[0] if row else 0

    # ---------- signals ----------

    def insert_signal(
        self,
        symbol: str,
        timestamp: datetime,
        strategy: str,
        signal: str,
        reason: str = "",
    ) -> None:
        with self._conn() as c:
            c.execute(
                "INSERT INTO signals (symbol, ts_utc, strategy, signal, reason) VALUES (?, ?, ?, ?, ?)",
                (symbol, _iso(timestamp), strategy, signal, reason),
            )

    def get_signals(
        self,
        symbol: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[SignalRow]:
        params: list = [symbol]
        q = "SELECT symbol, ts_utc, strategy, signal, reason FROM signals WHERE symbol = ?"
        q += _range_clause("ts_utc", since, until, params)
        q += " ORDER BY ts_utc ASC, id ASC"
        with self._conn() as c:
            rows = c.execute(q, params).fetchall()
        return [SignalRow(s, _parse_ts(ts), st, sig, r) for s, ts, st, sig, r in rows]

    # ---------- trades ----------

    def insert_trade(
        self,
        symbol: str,
        signal_timestamp: datetime,
        bar_date: datetime,
        side: str,
        quantity: int,
        price: Decimal,
    ) -> TradeRow:
        """Record a trade; total_value = quantity * price."""
        trade = TradeRow(
            symbol=symbol,
            signal_timestamp=to_utc(signal_timestamp),
            bar_date=to_utc(bar_date),
            side=side.upper(),
            quantity=quantity,
            price=price,
            total_value=price * quantity,
        )
        with self._conn() as c:
            c.execute(
                """
                INSERT INTO trades (symbol, signal_ts_utc, bar_date, side, quantity, price, total_value)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    trade.symbol,
                    _iso(trade.signal_timestamp),
                    _iso(trade.bar_date),
                    trade.side,
                    trade.quantity,
                    str(trade.price),
                    str(trade.total_value),
                ),
            )
        return trade

    def get_trades(
        self,
        symbol: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[TradeRow]:
        """Trades filtered on bar_date, ascending."""
        params: list = [symbol]
        q = (
            "SELECT symbol, signal_ts_utc, bar_date, side, quantity, price, total_value "
            "FROM trades WHERE symbol = ?"
        )
        q += _range_clause("bar_date", since, until, params)
        q += " ORDER BY bar_date ASC, id ASC"
        with self._conn() as c:
            rows = c.execute(q, params).fetchall()
        return [
            TradeRow(s, _parse_ts(sts), _parse_ts(bd), side, qty, Decimal(p), Decimal(tv))
            for s, sts, bd, side, qty, p, tv in rows
        ]
