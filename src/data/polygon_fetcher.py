"""
Polygon bar provider: one aggregates request for the whole window.

No pagination. Noise policy is PassThroughFilter; callers must not assume
the relative-volume filter runs for every vendor.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from market_core.contracts import Bar, Granularity, ensure_ascending
from market_core.noise_filter import NoiseFilter, PassThroughFilter

from data.errors import MalformedResponseError
from data.fetcher import check_days_history
from data.polygon_client import PolygonRestClient

logger = logging.getLogger(__name__)


class PolygonBarProvider:
    """Secondary vendor provider at a configured granularity (default: daily)."""

    name = "polygon"

    def __init__(
        self,
        client: PolygonRestClient,
        *,
        granularity: Granularity = Granularity.DAY,
        noise_filter: NoiseFilter | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self.granularity = granularity
        self.noise_filter = noise_filter or PassThroughFilter()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def fetch_bars(self, symbol: str, days_history: int) -> list[Bar]:
        check_days_history(days_history)
        end = self._clock()
        start = end - timedelta(days=days_history)
        records = self._client.get_aggregates(symbol, self.granularity.value, start, end)
        raw = [r.as_bar() for r in records]
        try:
            ensure_ascending(raw)
        except ValueError as exc:
            raise MalformedResponseError(f"Polygon bars for {symbol}: {exc}") from exc
        bars = self.noise_filter.apply(raw, self.granularity)
        logger.info(
            "Fetched %d %s bars for %s from polygon (%s)",
            len(bars), self.granularity.value, symbol, self.noise_filter.name,
        )
        return bars
