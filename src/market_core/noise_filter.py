"""
Volume noise filters: drop low-liquidity bars before they reach consumers.

Each vendor provider names the policy it applies, so an unfiltered vendor is
an explicit PassThroughFilter rather than a missing code path.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence

from market_core.contracts import Bar, Granularity


class NoiseFilter(Protocol):
    """Policy applied to a fully assembled fetch window."""

    name: str

    def apply(self, bars: Sequence[Bar], granularity: Granularity) -> list[Bar]:
        ...


def mean_volume(bars: Sequence[Bar]) -> Decimal:
    """Arithmetic mean volume; 0 for an empty sequence."""
    if not bars:
        return Decimal(0)
    return Decimal(sum(b.volume for b in bars)) / len(bars)


@dataclass(frozen=True)
class RelativeVolumeFilter:
    """
    Discard bars whose volume is below a liquidity threshold.

    Intraday: threshold = mean volume of the window * fraction.
    Daily: threshold = daily_floor, regardless of the mean.
    """

    fraction: Decimal = Decimal("0.2")
    daily_floor: int = 100_000
    name: str = "relative_volume"

    def threshold(self, bars: Sequence[Bar], granularity: Granularity) -> Decimal:
        if granularity is Granularity.DAY:
            return Decimal(self.daily_floor)
        return mean_volume(bars) * self.fraction

    def apply(self, bars: Sequence[Bar], granularity: Granularity) -> list[Bar]:
        limit = self.threshold(bars, granularity)
        return [b for b in bars if b.volume >= limit]


@dataclass(frozen=True)
class PassThroughFilter:
    """Keep every bar."""

    name: str = "pass_through"

    def apply(self, bars: Sequence[Bar], granularity: Granularity) -> list[Bar]:
        return list(bars)
