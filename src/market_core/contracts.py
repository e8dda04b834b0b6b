"""
Data contracts for market-core: Bar and Granularity.

Bars are the only shape that leaves the acquisition layer. Prices are kept as
Decimal in vendor currency units; vendor data is trusted as-is (no OHLC
consistency checks).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Sequence


class Granularity(str, Enum):
    """Bar interval unit. Values match the aggregate-endpoint timespan names."""

    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: str) -> "Granularity":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unsupported granularity '{value}'. Supported: {[g.value for g in cls]}"
            ) from None


# Last window length (in days) still requested as hourly bars.
HOURLY_MAX_DAYS = 60


def choose_granularity(days_history: int) -> Granularity:
    """Hourly bars for windows up to 60 days (inclusive), daily bars beyond."""
    if days_history <= HOURLY_MAX_DAYS:
        return Granularity.HOUR
    return Granularity.DAY


def to_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class Bar:
    """One normalized OHLCV observation. Timestamp is always UTC-aware."""

    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int

    def __post_init__(self) -> None:
        if self.volume < 0:
            raise ValueError(f"Bar volume must be non-negative, got {self.volume}")
        object.__setattr__(self, "timestamp", to_utc(self.timestamp))


def ensure_ascending(bars: Sequence[Bar]) -> None:
    """Raise ValueError unless timestamps are strictly increasing (no duplicates)."""
    for prev, cur in zip(bars, bars[1:]):
        if cur.timestamp <= prev.timestamp:
            raise ValueError(
                f"Bars out of order: {cur.timestamp.isoformat()} follows {prev.timestamp.isoformat()}"
            )
