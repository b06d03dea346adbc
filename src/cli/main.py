"""
CLI entry point: ledger ingest | match | exposure | health.

Every command loads config from --config (default config.yaml),
prints human-readable matching output, and logs to journal.
"""

import json
import logging
import sys
from decimal import Decimal, InvalidOperation

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("ledger")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _load(ctx: click.Context):
    try:
        return load_config(ctx.obj["config_path"])
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """fifo-ledger: FIFO round-trip matching of executed fills, with realized profit."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- ledger ingest ----------


def _make_source(cfg, export_file: str | None):
    """Build the configured fill source. Returns (source, description for messages)."""
    from data import KrakenExportSource, MockFillSource

    kind = cfg.data.source
    if kind == "kraken_export":
        path = export_file or cfg.data.export_path
        return KrakenExportSource(path), path
    if kind == "mock":
        return MockFillSource(), "mock source"
    raise click.ClickException(f"Unknown data source {kind!r}; expected 'kraken_export' or 'mock'")


@cli.command()
@click.option("--file", "export_file", default=None, help="Kraken ClosedOrders export (JSON). Defaults to data.export_path.")
@click.option("--start", default=None, type=float, help="Only ingest fills settled at or after this epoch second.")
@click.option("--end", default=None, type=float, help="Only ingest fills settled at or before this epoch second.")
@click.pass_context
def ingest(ctx: click.Context, export_file: str | None, start: float | None, end: float | None) -> None:
    """Fetch fills from the configured source and store them locally."""
    cfg = _load(ctx)
    from cli.structured_log import StructuredEventLogger
    from data import ExportFormatError, FillStore
    from fifo_core.contracts import InvalidFillError

    events = StructuredEventLogger(
        "ingest",
        enabled=cfg.alerting.structured_logs,
        webhook_url=cfg.alerting.webhook_url,
    )
    try:
        source, origin = _make_source(cfg, export_file)
        result = source.fetch(start=start, end=end)
    except click.ClickException as e:
        events.error("ingest failed", detail=e.format_message())
        raise
    except (FileNotFoundError, ExportFormatError, InvalidFillError) as e:
        events.error("ingest failed", detail=str(e))
        raise click.ClickException(str(e)) from e

    if not result.fills:
        click.echo(f"No fills in {origin}. Check the export and the --start/--end window.")
        return
    store = FillStore(cfg.data.fill_store_path)
    store.write_fills(result.fills)
    click.echo(f"Stored {len(result.fills)} fills from {result.source} in {cfg.data.fill_store_path}")
    click.echo(f"  Total fills in store: {store.count_fills()}")


def _load_fills(cfg, instrument: str | None):
    from data import FillStore

    store = FillStore(cfg.data.fill_store_path)
    if instrument:
        return store.get_fills(instrument=instrument)
    fills = store.get_fills()
    if cfg.instruments:
        wanted = set(cfg.instruments)
        fills = [f for f in fills if f.instrument in wanted]
    return fills


# ---------- ledger match ----------


@cli.command()
@click.option("--instrument", default=None, help="Only match this instrument (e.g. XBTUSD).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the JSON report instead of text.")
@click.pass_context
def match(ctx: click.Context, instrument: str | None, as_json: bool) -> None:
    """Match stored fills FIFO into closed positions and open exposure."""
    cfg = _load(ctx)
    from cli.output import format_match_report, to_report
    from cli.structured_log import StructuredEventLogger
    from fifo_core import group_by_instrument, match_fills
    from journal import JournalWriter

    events = StructuredEventLogger(
        "match",
        enabled=cfg.alerting.structured_logs,
        webhook_url=cfg.alerting.webhook_url,
    )
    fills = _load_fills(cfg, instrument)
    if not fills:
        click.echo("No fills in store. Run 'ledger ingest' first.")
        return

    events.match_start(fills=len(fills), instruments=len(group_by_instrument(fills)))
    result = match_fills(fills)
    for p in result.closed_positions:
        events.position_closed(p.instrument, p.profit, p.closed_at, len(p.fills))
    for f in result.unmatched_sells:
        events.unmatched_sell(f.instrument, f.order_id, f.volume)
    events.match_complete(len(result.closed_positions), len(result.open_exposure), result.realized_profit)

    journal = JournalWriter(cfg.journal.path, echo_stdout=cfg.journal.echo_stdout)
    journal.match_run(result, instrument=instrument)

    if as_json:
        click.echo(json.dumps(to_report(result), indent=2))
    else:
        click.echo(format_match_report(result))


# ---------- ledger exposure ----------


def _parse_marks(marks: tuple[str, ...]) -> dict[str, Decimal]:
    out: dict[str, Decimal] = {}
    for m in marks:
        pair, sep, price = m.partition("=")
        if not sep or not pair:
            raise click.BadParameter(f"expected PAIR=PRICE, got {m!r}", param_hint="--mark")
        try:
            out[pair] = Decimal(price)
        except InvalidOperation as e:
            raise click.BadParameter(f"price for {pair} is not a number: {price!r}", param_hint="--mark") from e
    return out


@cli.command()
@click.option("--instrument", default=None, help="Only show this instrument.")
@click.option("--mark", "marks", multiple=True, help="Mark price for unrealized P&L, as PAIR=PRICE. Repeatable.")
@click.pass_context
def exposure(ctx: click.Context, instrument: str | None, marks: tuple[str, ...]) -> None:
    """Show open buy volume per instrument, with unrealized P&L against supplied marks."""
    cfg = _load(ctx)
    from cli.output import format_exposure
    from fifo_core import match_fills, summarize_exposure

    mark_prices = _parse_marks(marks)
    result = match_fills(_load_fills(cfg, instrument))
    click.echo(format_exposure(summarize_exposure(result.open_exposure), mark_prices))


# ---------- ledger health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check system health: config, fill store access, fill count.

    Exit code 0 = healthy, 1 = unhealthy.
    """
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = load_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded (source={cfg.data.source})"))
    except Exception as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    try:
        from data import FillStore
        store = FillStore(cfg.data.fill_store_path)
        count = store.count_fills()
        if count > 0:
            checks.append(("fills", True, f"{count} fills across {len(store.instruments())} instruments"))
        else:
            checks.append(("fills", False, f"no fills in {cfg.data.fill_store_path}"))
    except Exception as e:
        checks.append(("fills", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()
