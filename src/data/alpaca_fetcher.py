"""
Alpaca bar provider: paginated retrieval through the alpaca-py SDK.

Maps raw Alpaca bar records to market_core.contracts.Bar (Decimal OHLC, UTC timestamp).
Pages are drained via next_page_token, guarded by a page cap.
Granularity adapts to the window length; low-volume bars are dropped after assembly.
Free tier uses IEX data; SIP requires Algo Trader Plus subscription.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable

from market_core.contracts import Bar, Granularity, choose_granularity, ensure_ascending
from market_core.noise_filter import NoiseFilter, RelativeVolumeFilter

from data.errors import MalformedResponseError, PaginationLimitExceeded, TransportError
from data.fetcher import BarPage, BarPageSource, check_days_history

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_LAG = timedelta(hours=1)
DEFAULT_MAX_PAGES = 1000
DEFAULT_PAGE_SIZE = 10_000

_TIMEFRAME_MAP = {
    Granularity.MINUTE: "1Min",
    Granularity.HOUR: "1Hour",
    Granularity.DAY: "1Day",
    Granularity.WEEK: "1Week",
    Granularity.MONTH: "1Month",
}


def _rfc3339(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_record(raw: dict[str, Any]) -> Bar:
    try:
        ts = datetime.fromisoformat(str(raw["t"]).replace("Z", "+00:00"))
        return Bar(
            timestamp=ts,
            open=Decimal(str(raw["o"])),
            high=Decimal(str(raw["h"])),
            low=Decimal(str(raw["l"])),
            close=Decimal(str(raw["c"])),
            volume=int(raw["v"]),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        raise MalformedResponseError(f"Bad Alpaca bar record {raw!r}: {exc}") from exc


class AlpacaPageSource:
    """
    One raw /stocks/bars request per page via StockHistoricalDataClient.

    API keys via constructor (typically from AppConfig, sourced from env vars).
    A pre-built client may be injected instead.
    """

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        *,
        feed: str = "iex",
        page_size: int = DEFAULT_PAGE_SIZE,
        client: Any = None,
    ) -> None:
        self._feed = feed.lower()
        self._page_size = page_size
        if client is not None:
            self._client = client
            return
        if not api_key or not api_secret:
            raise ValueError(
                "Alpaca API key and secret are required. "
                "Set APCA_API_KEY_ID and APCA_API_SECRET_KEY environment variables."
            )
        from alpaca.data.historical import StockHistoricalDataClient

        self._client = StockHistoricalDataClient(api_key, api_secret)

    def request_page(
        self,
        symbol: str,
        granularity: Granularity,
        start: datetime,
        end: datetime,
        page_token: str | None = None,
    ) -> BarPage:
        params: dict[str, Any] = {
            "symbols": symbol,
            "timeframe": _TIMEFRAME_MAP[granularity],
            "start": _rfc3339(start),
            "end": _rfc3339(end),
            "limit": self._page_size,
            "feed": self._feed,
            "sort": "asc",
        }
        if page_token:
            params["page_token"] = page_token

        from alpaca.common.exceptions import APIError
        from requests.exceptions import RequestException

        try:
            response = self._client.get("/stocks/bars", params)
        except (APIError, RequestException) as exc:
            raise TransportError(f"Alpaca bars request failed for {symbol}: {exc}") from exc

        if not isinstance(response, dict):
            raise MalformedResponseError(
                f"Alpaca bars response must be an object, got {type(response).__name__}"
            )
        by_symbol = response.get("bars") or {}
        if not isinstance(by_symbol, dict):
            raise MalformedResponseError(
                f"Alpaca `bars` must map symbols to bar lists, got {type(by_symbol).__name__}"
            )
        raw_bars = by_symbol.get(symbol) or []
        if not isinstance(raw_bars, list):
            raise MalformedResponseError(
                f"Alpaca bars for {symbol} must be a list, got {type(raw_bars).__name__}"
            )
        return BarPage(
            bars=[_parse_record(r) for r in raw_bars],
            next_page_token=response.get("next_page_token") or None,
        )


class AlpacaBarProvider:
    """
    Primary vendor provider.

    Window: end = now - request_lag (skip not-yet-final bars), start = end - days_history.
    Granularity: hourly up to 60 days, daily beyond.
    Noise policy: RelativeVolumeFilter (applied to the whole window, after all pages).
    """

    name = "alpaca"

    def __init__(
        self,
        source: BarPageSource,
        *,
        paper: bool = True,
        request_lag: timedelta = DEFAULT_REQUEST_LAG,
        max_pages: int = DEFAULT_MAX_PAGES,
        noise_filter: NoiseFilter | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self.paper = paper
        self.request_lag = request_lag
        self.max_pages = max_pages
        self.noise_filter = noise_filter or RelativeVolumeFilter()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def environment(self) -> str:
        return "paper" if self.paper else "live"

    def window(self, days_history: int) -> tuple[datetime, datetime]:
        end = self._clock() - self.request_lag
        return end - timedelta(days=days_history), end

    def fetch_all_pages(
        self,
        symbol: str,
        granularity: Granularity,
        start: datetime,
        end: datetime,
    ) -> list[Bar]:
        """Drain every page for the window. Any fault discards what was accumulated."""
        bars: list[Bar] = []
        token: str | None = None
        pages = 0
        while True:
            if pages >= self.max_pages:
                raise PaginationLimitExceeded(
                    f"Alpaca returned more than {self.max_pages} pages for {symbol}"
                )
            page = self._source.request_page(symbol, granularity, start, end, token)
            pages += 1
            bars.extend(page.bars)
            logger.debug("Page %d for %s: %d bars", pages, symbol, len(page.bars))
            token = page.next_page_token
            if not token:
                return bars

    def fetch_bars(self, symbol: str, days_history: int) -> list[Bar]:
        check_days_history(days_history)
        granularity = choose_granularity(days_history)
        start, end = self.window(days_history)
        raw = self.fetch_all_pages(symbol, granularity, start, end)
        try:
            ensure_ascending(raw)
        except ValueError as exc:
            raise MalformedResponseError(f"Alpaca bars for {symbol}: {exc}") from exc
        bars = self.noise_filter.apply(raw, granularity)
        logger.info(
            "Fetched %d %s bars for %s from alpaca (%s), dropped %d by %s",
            len(bars), granularity.value, symbol, self.environment,
            len(raw) - len(bars), self.noise_filter.name,
        )
        return bars
