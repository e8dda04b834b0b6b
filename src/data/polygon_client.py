"""Polygon aggregates REST client: one GET per call, no retry, no rate-limit handling."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import requests

from market_core.contracts import Bar

from data.errors import MalformedResponseError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.polygon.io"
DEFAULT_LIMIT = 50_000
DEFAULT_TIMEOUT = 30.0

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def from_epoch_millis(ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=ms)


@dataclass(frozen=True)
class PolygonAggregate:
    """Raw aggregate record: {t: epoch-millis, o, h, l, c, v}."""

    t: int
    o: Decimal
    h: Decimal
    l: Decimal
    c: Decimal
    v: int

    def as_bar(self) -> Bar:
        return Bar(
            timestamp=from_epoch_millis(self.t),
            open=self.o,
            high=self.h,
            low=self.l,
            close=self.c,
            volume=self.v,
        )


def _parse_aggregate(raw: Any) -> PolygonAggregate:
    try:
        return PolygonAggregate(
            t=int(raw["t"]),
            o=Decimal(str(raw["o"])),
            h=Decimal(str(raw["h"])),
            l=Decimal(str(raw["l"])),
            c=Decimal(str(raw["c"])),
            # volume can arrive as 1.2e6 on some tickers
            v=int(Decimal(str(raw["v"]))),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        raise MalformedResponseError(f"Bad Polygon aggregate {raw!r}: {exc}") from exc


class PolygonRestClient:
    """Thin wrapper over /v2/aggs/ticker/{symbol}/range/1/{timespan}/{from}/{to}."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        limit: int = DEFAULT_LIMIT,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Polygon API key is required. Set POLYGON_API_KEY environment variable.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._limit = limit
        self._timeout = timeout
        self._session = session or requests.Session()

    def aggregates_url(self, symbol: str, timespan: str, start: datetime, end: datetime) -> str:
        return (
            f"{self._base_url}/v2/aggs/ticker/{symbol}/range/1/{timespan}/"
            f"{start:%Y-%m-%d}/{end:%Y-%m-%d}"
        )

    def get_aggregates(
        self,
        symbol: str,
        timespan: str,
        start: datetime,
        end: datetime,
    ) -> list[PolygonAggregate]:
        """Single request for the window. Missing `results` is an empty list."""
        url = self.aggregates_url(symbol, timespan, start, end)
        params = {
            "adjusted": "true",
            "sort": "asc",
            "limit": self._limit,
            "apiKey": self._api_key,
        }
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"Polygon aggregates request failed for {symbol}: {exc}") from exc

        try:
            payload = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise MalformedResponseError(f"Polygon response for {symbol} is not JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Polygon response for {symbol} must be an object, got {type(payload).__name__}"
            )

        results = payload.get("results") or []
        if not isinstance(results, list):
            raise MalformedResponseError(
                f"Polygon `results` for {symbol} must be a list, got {type(results).__name__}"
            )
        logger.debug(
            "Polygon %s status=%s results=%d", payload.get("ticker", symbol), payload.get("status"), len(results)
        )
        return [_parse_aggregate(r) for r in results]
