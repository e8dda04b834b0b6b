"""Tests for volume noise filters."""

from decimal import Decimal

from market_core.contracts import Granularity
from market_core.noise_filter import PassThroughFilter, RelativeVolumeFilter, mean_volume

from conftest import hourly_bars


class TestRelativeVolumeFilter:
    def test_intraday_threshold_is_fifth_of_mean(self) -> None:
        bars = hourly_bars([10, 50, 200, 240])
        f = RelativeVolumeFilter()
        assert mean_volume(bars) == Decimal(125)
        assert f.threshold(bars, Granularity.HOUR) == Decimal(25)

    def test_intraday_drops_below_threshold(self) -> None:
        bars = hourly_bars([10, 50, 200, 240])
        kept = RelativeVolumeFilter().apply(bars, Granularity.HOUR)
        assert [b.volume for b in kept] == [50, 200, 240]

    def test_bar_at_threshold_is_kept(self) -> None:
        # mean 125 -> threshold 25
        bars = hourly_bars([25, 50, 200, 225])
        kept = RelativeVolumeFilter().apply(bars, Granularity.HOUR)
        assert [b.volume for b in kept] == [25, 50, 200, 225]

    def test_daily_uses_fixed_floor(self) -> None:
        bars = hourly_bars([99_999, 100_000, 5_000_000])
        f = RelativeVolumeFilter()
        assert f.threshold(bars, Granularity.DAY) == Decimal(100_000)
        kept = f.apply(bars, Granularity.DAY)
        assert [b.volume for b in kept] == [100_000, 5_000_000]

    def test_daily_floor_ignores_low_mean(self) -> None:
        bars = hourly_bars([10, 20, 30])
        assert RelativeVolumeFilter().apply(bars, Granularity.DAY) == []

    def test_empty_window_is_noop(self) -> None:
        f = RelativeVolumeFilter()
        assert f.threshold([], Granularity.HOUR) == 0
        assert f.apply([], Granularity.HOUR) == []

    def test_order_preserved(self) -> None:
        bars = hourly_bars([300, 5, 100, 400])
        kept = RelativeVolumeFilter().apply(bars, Granularity.HOUR)
        assert [b.timestamp for b in kept] == [bars[0].timestamp, bars[2].timestamp, bars[3].timestamp]

    def test_custom_fraction(self) -> None:
        bars = hourly_bars([10, 90])
        kept = RelativeVolumeFilter(fraction=Decimal("0.5")).apply(bars, Granularity.HOUR)
        assert [b.volume for b in kept] == [90]


def test_pass_through_keeps_everything() -> None:
    bars = hourly_bars([0, 1, 1_000_000])
    f = PassThroughFilter()
    assert f.apply(bars, Granularity.DAY) == bars
    assert f.name == "pass_through"
