"""
Structured JSON event logger for ingest runs.

Emits one JSON object per line to stderr. Events are designed to be
parsed by log aggregators (Grafana Loki, CloudWatch, ELK).
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredEventLogger:
    """Emit structured JSON events for a provider's fetches."""

    def __init__(
        self,
        provider: str,
        *,
        enabled: bool = True,
        stream: Any = None,
    ) -> None:
        self._provider = provider
        self._enabled = enabled
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "provider": self._provider,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record) + "\n")
            self._stream.flush()
        return record

    def fetch_start(self, symbol: str, days_history: int) -> dict:
        return self._emit("fetch_start", symbol=symbol, days_history=days_history)

    def fetch_complete(
        self,
        symbol: str,
        bars: int,
        first: str | None = None,
        last: str | None = None,
    ) -> dict:
        return self._emit("fetch_complete", symbol=symbol, bars=bars, first=first, last=last)

    def fetch_failed(self, symbol: str, error: str, detail: str = "") -> dict:
        return self._emit("fetch_failed", symbol=symbol, error=error, detail=detail)

    def insufficient_data(self, symbol: str, bars: int, min_bars: int) -> dict:
        return self._emit("insufficient_data", symbol=symbol, bars=bars, min_bars=min_bars)

    def ingest_complete(self, symbols: int, succeeded: int, stored: int) -> dict:
        return self._emit(
            "ingest_complete",
            symbols=symbols,
            succeeded=succeeded,
            stored=stored,
        )
