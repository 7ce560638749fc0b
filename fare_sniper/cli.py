from __future__ import annotations

import logging
from typing import Optional

import click
from rich.console import Console
from rich.live import Live
from rich.table import Table

from .aggregator import daily_summary, overall_lowest
from .config import RunConfig, get_settings, validate_snapshot_path
from .dashboard import Dashboard
from .errors import FetcherError, NoFaresFound
from .fare_engine import lowest_fare
from .ledger import FareLedger, load_snapshot
from .models import Direction
from .notifier import TwilioNotifier
from .southwest_fetcher import SouthwestFetcher
from .tracker import FareTracker

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Log to a file; the terminal belongs to the dashboard."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        handlers=[logging.FileHandler(settings.log_file)],
        format=LOG_FORMAT,
    )


def _check_snapshot_path(ctx, param, value: Optional[str]) -> Optional[str]:
    try:
        return validate_snapshot_path(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
def cli() -> None:
    """Track Southwest round-trip fares and alert on deals."""


@cli.command()
@click.option("--from", "origin", help="Origin airport IATA code")
@click.option("--to", "destination", help="Destination airport IATA code")
@click.option("--leave-date", "outbound_date", help="Outbound date")
@click.option("--return-date", "return_date", help="Return date")
@click.option("--passengers", type=int, default=1, show_default=True)
@click.option(
    "--deal-price-threshold",
    type=int,
    default=None,
    help="Alert when a lowest fare is at or below this price",
)
@click.option(
    "--interval",
    type=float,
    default=30,
    show_default=True,
    help="Minutes between fetches",
)
@click.option(
    "--save-log",
    "save_log",
    callback=_check_snapshot_path,
    help="JSON file to keep history in (resumed if it exists)",
)
@click.option("--once", is_flag=True, help="Run a single iteration and exit")
def run(
    origin: Optional[str],
    destination: Optional[str],
    outbound_date: Optional[str],
    return_date: Optional[str],
    passengers: int,
    deal_price_threshold: Optional[int],
    interval: float,
    save_log: Optional[str],
    once: bool,
) -> None:
    """Poll fares forever and show the dashboard."""
    configure_logging()

    cfg = RunConfig(
        origin=origin,
        destination=destination,
        outbound_date=outbound_date,
        return_date=return_date,
        passengers=passengers,
        deal_price_threshold=deal_price_threshold,
        interval_min=interval,
        snapshot_path=save_log,
    )
    ledger = FareLedger()
    if save_log:
        snapshot = load_snapshot(save_log)
        if snapshot is not None:
            cfg = snapshot.config
            ledger = FareLedger(snapshot.records)

    logger.info(
        "Tracking %s->%s %s/%s every %s min",
        cfg.origin,
        cfg.destination,
        cfg.outbound_date,
        cfg.return_date,
        cfg.interval_min,
    )

    dashboard = Dashboard()
    tracker = FareTracker(
        cfg,
        SouthwestFetcher(),
        dashboard,
        ledger=ledger,
        notifier=TwilioNotifier(),
    )
    tracker.show_settings()
    tracker.replay_history()

    with Live(dashboard, screen=not once, refresh_per_second=1) as live:
        dashboard.attach(live)
        try:
            tracker.run_forever(max_cycles=1 if once else None)
        except KeyboardInterrupt:
            logger.info("Interrupted, exiting")


@cli.command()
@click.option("--from", "origin", required=True)
@click.option("--to", "destination", required=True)
@click.option("--leave-date", "outbound_date", required=True)
@click.option("--return-date", "return_date", required=True)
@click.option("--passengers", type=int, default=1, show_default=True)
def fetch(
    origin: str,
    destination: str,
    outbound_date: str,
    return_date: str,
    passengers: int,
) -> None:
    """Fetch fares once and print them."""
    cfg = RunConfig(
        origin=origin,
        destination=destination,
        outbound_date=outbound_date,
        return_date=return_date,
        passengers=passengers,
    )
    try:
        batch = SouthwestFetcher().search_fares(cfg)
    except FetcherError as exc:
        raise click.ClickException(str(exc)) from exc

    for direction in Direction:
        prices = batch.for_direction(direction)
        click.echo(f"{direction.value}: {', '.join(f'${p}' for p in prices) or '-'}")
        try:
            click.echo(f"  lowest: ${lowest_fare(prices, direction.value)}")
        except NoFaresFound as exc:
            click.echo(f"  {exc}")


@cli.command()
@click.argument("save_log", callback=_check_snapshot_path)
def history(save_log: str) -> None:
    """Summarise a saved history file per day."""
    snapshot = load_snapshot(save_log)
    if snapshot is None or not snapshot.records:
        raise click.ClickException(f"No history in {save_log}")

    cfg = snapshot.config
    summary = daily_summary(snapshot.records)

    table = Table(
        title=f"{cfg.origin} → {cfg.destination} ({cfg.outbound_date} – {cfg.return_date})"
    )
    for col in ("Day", "Lowest outbound", "Lowest return", "Cycles", "Deals"):
        table.add_column(col, justify="right")
    for row in summary.itertuples(index=False):
        table.add_row(
            row.day.strftime("%Y-%m-%d"),
            f"${row.min_outbound}",
            f"${row.min_return}",
            str(row.cycles),
            str(row.deals),
        )

    console = Console()
    console.print(table)
    for direction in Direction:
        best = overall_lowest(snapshot.records, direction)
        if best is not None:
            fare, when = best
            console.print(f"Best {direction.value}: ${fare} at {when}")


if __name__ == "__main__":
    cli()
