"""
CLI entry point: barfeed fetch | ingest | check-config | prices.

Every command loads config from --config (default config.yaml).
Secrets come from the environment, optionally via a .env file.
"""

import logging
import sys
from datetime import datetime, timedelta, timezone

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("barfeed")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


class InclusiveEndDate(click.DateTime):
    """click.DateTime where a bare date means the end of that day."""

    def convert(self, value, param, ctx):
        ts = super().convert(value, param, ctx)
        if isinstance(value, str) and len(value.strip()) == 10:
            ts = ts + timedelta(days=1, microseconds=-1)
        return ts


def _utc(ts: datetime | None) -> datetime | None:
    if ts is None:
        return None
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """barfeed: fetch, normalize and store historical price bars from Alpaca or Polygon."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- barfeed fetch ----------


@cli.command()
@click.argument("symbol")
@click.option("--days", default=None, type=click.IntRange(min=1), help="Days of history (default: days_history from config).")
@click.option("--tail", default=20, show_default=True, help="Print only the last N bars (0 = all).")
@click.pass_context
def fetch(ctx: click.Context, symbol: str, days: int | None, tail: int) -> None:
    """Fetch bars for one symbol and print them. Nothing is stored."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.output import format_bars
    from data.errors import MarketDataError
    from data.selector import select_provider

    days = days if days is not None else cfg.days_history
    try:
        provider = select_provider(cfg)
        bars = provider.fetch_bars(symbol.upper(), days)
    except MarketDataError as exc:
        raise click.ClickException(f"{type(exc).__name__}: {exc}") from exc
    click.echo(format_bars(symbol.upper(), bars, source=provider.name, tail=tail or None))


# ---------- barfeed ingest ----------


@cli.command()
@click.option("--symbol", "symbols", multiple=True, help="Symbol to ingest (repeatable). Defaults to config symbols.")
@click.option("--days", default=None, type=click.IntRange(min=1), help="Days of history (default: days_history from config).")
@click.pass_context
def ingest(ctx: click.Context, symbols: tuple[str, ...], days: int | None) -> None:
    """Fetch every configured symbol; store prices when persist_price_data is set.

    A failing symbol is reported and skipped; the run continues with the next one.
    """
    cfg = load_config(ctx.obj["config_path"])
    from cli.structured_log import StructuredEventLogger
    from data.errors import ConfigurationError, MarketDataError
    from data.price_store import PriceStore
    from data.selector import select_provider

    targets = [s.upper() for s in symbols] or list(cfg.symbols)
    if not targets:
        raise click.ClickException("No symbols given. Use --symbol or set 'symbols' in config.")
    days = days if days is not None else cfg.days_history

    try:
        provider = select_provider(cfg)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    store = None
    if cfg.persist_price_data:
        if not cfg.storage.db_path:
            raise click.ClickException("storage.db_path is required when persist_price_data is true.")
        store = PriceStore(cfg.storage.db_path)

    events = StructuredEventLogger(provider.name, enabled=cfg.events.structured)
    succeeded = 0
    stored = 0
    for symbol in targets:
        click.echo(f"Fetching {symbol} ({days} days) from {provider.name} ...")
        events.fetch_start(symbol, days)
        try:
            bars = provider.fetch_bars(symbol, days)
        except MarketDataError as exc:
            logger.error("Fetch failed for %s: %s", symbol, exc)
            events.fetch_failed(symbol, type(exc).__name__, str(exc))
            click.echo(f"  Error processing {symbol}: {exc}")
            continue

        events.fetch_complete(
            symbol,
            len(bars),
            bars[0].timestamp.isoformat() if bars else None,
            bars[-1].timestamp.isoformat() if bars else None,
        )
        if len(bars) < cfg.min_bars:
            events.insufficient_data(symbol, len(bars), cfg.min_bars)
            click.echo(f"  Not enough data for {symbol}: {len(bars)} bars (need {cfg.min_bars}).")
            continue

        succeeded += 1
        if store is not None:
            stored += store.write_prices(symbol, bars)
            click.echo(f"  Stored {len(bars)} bars in {cfg.storage.db_path}")
        else:
            click.echo(f"  Fetched {len(bars)} bars.")

    events.ingest_complete(len(targets), succeeded, stored)
    click.echo(f"Done: {succeeded}/{len(targets)} symbols, {stored} bars stored.")


# ---------- barfeed check-config ----------


@cli.command("check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Show which vendor the config resolves to and any problems with it."""
    cfg = load_config(ctx.obj["config_path"])
    from config import DataSource, validate_config
    from data.selector import resolve_vendor

    vendor = resolve_vendor(cfg.mode, cfg.data_source)
    click.echo(f"Mode: {cfg.mode.value}  Data source: {cfg.data_source.value}  -> vendor: {vendor.value}")
    if vendor is DataSource.ALPACA:
        click.echo(f"Alpaca environment: {'paper' if cfg.use_paper_when_live else 'live'}")
    errors = validate_config(cfg)
    if errors:
        for err in errors:
            click.echo(f"  - {err}")
        ctx.exit(1)
    click.echo("Config OK.")


# ---------- barfeed prices ----------


@cli.command()
@click.argument("symbol")
@click.option("--start", default=None, type=click.DateTime(_DATE_FORMATS), help="Start date filter (ISO).")
@click.option("--end", default=None, type=InclusiveEndDate(_DATE_FORMATS), help="End date filter (ISO); a bare date includes that whole day.")
@click.option("--tail", default=20, show_default=True, help="Print only the last N bars (0 = all).")
@click.pass_context
def prices(ctx: click.Context, symbol: str, start: datetime | None, end: datetime | None, tail: int) -> None:
    """List stored prices for a symbol."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.output import format_bars
    from data.price_store import PriceStore

    if not cfg.storage.db_path:
        raise click.ClickException("storage.db_path is not set in config.")
    store = PriceStore(cfg.storage.db_path)
    bars = store.get_prices(symbol.upper(), since=_utc(start), until=_utc(end))
    if not bars:
        click.echo(f"No stored prices for {symbol.upper()}. Run 'barfeed ingest' first.")
        return
    click.echo(format_bars(symbol.upper(), bars, source=str(store.path), tail=tail or None))


if __name__ == "__main__":
    cli()
