"""
market-core: normalized bar contracts and pure bar policies.

No I/O. The data package depends on market_core; never the reverse.
"""

from market_core.contracts import (
    HOURLY_MAX_DAYS,
    Bar,
    Granularity,
    choose_granularity,
    ensure_ascending,
)
from market_core.noise_filter import NoiseFilter, PassThroughFilter, RelativeVolumeFilter

__all__ = [
    "HOURLY_MAX_DAYS",
    "Bar",
    "Granularity",
    "NoiseFilter",
    "PassThroughFilter",
    "RelativeVolumeFilter",
    "choose_granularity",
    "ensure_ascending",
]
