"""
Human-readable bar output for the terminal.
"""

from __future__ import annotations

from typing import Sequence

from market_core.contracts import Bar


def _fmt_volume(vol: int | float) -> str:
    if vol >= 1_000_000:
        return f"{vol / 1_000_000:.2f}M"
    if vol >= 1_000:
        return f"{vol / 1_000:.0f}K"
    return str(int(vol))


def format_bar(bar: Bar) -> str:
    return (
        f"{bar.timestamp.isoformat()}  O {bar.open:.2f}  H {bar.high:.2f}  "
        f"L {bar.low:.2f}  C {bar.close:.2f}  V {_fmt_volume(bar.volume)}"
    )


def format_bars(symbol: str, bars: Sequence[Bar], *, source: str = "", tail: int | None = None) -> str:
    """Summary header plus one line per bar (only the last `tail` bars when given)."""
    if not bars:
        return f"No bars for {symbol}."
    header = f"--- {symbol}: {len(bars)} bars"
    if source:
        header += f" from {source}"
    header += f" ({bars[0].timestamp.isoformat()} -> {bars[-1].timestamp.isoformat()}) ---"
    shown = list(bars[-tail:]) if tail else list(bars)
    lines = [header]
    if len(shown) < len(bars):
        lines.append(f"  ... {len(bars) - len(shown)} earlier bars omitted")
    lines.extend(f"  {format_bar(b)}" for b in shown)
    return "\n".join(lines)
