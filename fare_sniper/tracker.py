"""Fetch → reduce → compare → evaluate → record → present → sleep loop."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from rich.markup import escape

from .airports import airport_marker
from .config import RunConfig
from .errors import (
    FetcherError,
    InvalidDelta,
    NoFaresFound,
    NotificationError,
    PersistenceError,
)
from .fare_engine import compute_deltas, is_deal, lowest_fare
from .ledger import FareLedger, save_snapshot
from .messages import deal_markup, deal_message, fare_lines, settings_lines
from .models import CycleResult, Direction, FareBatch, now_stamp
from .notifier import TwilioNotifier

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def search_fares(self, cfg: RunConfig) -> FareBatch: ...


class Presenter(Protocol):
    def settings(self, lines: list[str]) -> None: ...

    def waypoint(self, marker: dict) -> None: ...

    def log(self, messages: list[str], datetime: Optional[str] = None) -> None: ...

    def plot(self, datetime: str, outbound: int, return_: int) -> None: ...

    def render(self) -> None: ...


class FareTracker:
    """
    Drives the polling cycle for one route.

    The ledger is the only state carried between cycles; the previous
    lowest fares are read from its last record.
    """

    def __init__(
        self,
        config: RunConfig,
        fetcher: Fetcher,
        dashboard: Presenter,
        ledger: Optional[FareLedger] = None,
        notifier: Optional[TwilioNotifier] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = now_stamp,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.dashboard = dashboard
        self.ledger = ledger if ledger is not None else FareLedger()
        self.notifier = notifier
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Startup
    # ------------------------------------------------------------------ #
    def show_settings(self) -> None:
        """Map waypoints and the settings panel."""
        cfg = self.config
        for code, color in ((cfg.origin, "red"), (cfg.destination, "yellow")):
            marker = airport_marker(code, color)
            if marker is None:
                logger.warning("No coordinates for airport %r", code)
                continue
            self.dashboard.waypoint(marker)

        sms_to = None
        if self.notifier is not None and self.notifier.configured:
            sms_to = self.notifier.recipient
        self.dashboard.settings(settings_lines(cfg, sms_to))

    def replay_history(self) -> None:
        """Push every seeded ledger record to the dashboard, oldest first."""
        for record in self.ledger:
            self._present(record)
        logger.info("Replayed %d historical records", len(self.ledger))

    # ------------------------------------------------------------------ #
    # One cycle
    # ------------------------------------------------------------------ #
    def run_once(self) -> Optional[CycleResult]:
        """Run a single cycle; returns the recorded result or ``None``."""
        try:
            try:
                record = self._evaluate()
            except (FetcherError, NoFaresFound) as exc:
                self._report("Scrape failed", exc)
                record = None
            except InvalidDelta as exc:
                self._report("Invalid fare delta, cycle discarded", exc)
                record = None

            if record is not None:
                self.ledger.append(record)
                self._persist()
                self._present(record)
                if record.is_deal:
                    self._notify(record)
        finally:
            self.dashboard.render()
        return record

    def _evaluate(self) -> CycleResult:
        batch = self.fetcher.search_fares(self.config)

        outbound = lowest_fare(batch.outbound, Direction.OUTBOUND.value)
        return_ = lowest_fare(batch.return_, Direction.RETURN.value)

        out_delta, ret_delta = compute_deltas(
            self.ledger.last_lowest_pair(), (outbound, return_)
        )
        deal = is_deal(self.config.deal_price_threshold, outbound, return_)
        logger.info(
            "Lowest fares: outbound=%s (%s) return=%s (%s) deal=%s",
            outbound,
            out_delta.kind.value,
            return_,
            ret_delta.kind.value,
            deal,
        )
        return CycleResult(
            lowest_outbound_fare=outbound,
            lowest_return_fare=return_,
            outbound_delta=out_delta,
            return_delta=ret_delta,
            is_deal=deal,
            datetime=self._clock(),
        )

    def _present(self, record: CycleResult) -> None:
        if record.is_deal:
            self.dashboard.log(
                [deal_markup(record.lowest_outbound_fare, record.lowest_return_fare)],
                record.datetime,
            )
        self.dashboard.log(fare_lines(record), record.datetime)
        self.dashboard.plot(
            record.datetime, record.lowest_outbound_fare, record.lowest_return_fare
        )

    def _persist(self) -> None:
        path = self.config.snapshot_path
        if not path:
            return
        try:
            save_snapshot(path, self.config, self.ledger)
        except PersistenceError as exc:
            self._report("Could not save history", exc)

    def _notify(self, record: CycleResult) -> None:
        if self.notifier is None or not self.notifier.configured:
            return
        message = deal_message(record.lowest_outbound_fare, record.lowest_return_fare)
        try:
            self.notifier.send_sms(message)
        except NotificationError as exc:
            self._report("SMS failed", exc)
            return
        self.dashboard.log(
            [
                f"[green]Successfully sent SMS to {self.notifier.recipient} "
                f"from {self.notifier.sender}[/green]"
            ]
        )

    def _report(self, what: str, exc: Exception) -> None:
        logger.warning("%s: %s: %s", what, type(exc).__name__, exc)
        self.dashboard.log(
            [f"[red]{what}: {type(exc).__name__}: {escape(str(exc))}[/red]"]
        )

    # ------------------------------------------------------------------ #
    # Loop
    # ------------------------------------------------------------------ #
    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """Cycle then sleep ``interval`` until interrupted.

        ``max_cycles`` bounds the loop (``--once``); the sleep after the last
        bounded cycle is skipped. Returns the number of cycles run.
        """
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            try:
                self.run_once()
            except Exception:
                logger.exception("Unexpected error in fare cycle")
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            logger.debug("Sleeping %.0f s", self.config.interval_s)
            self._sleep(self.config.interval_s)
        return cycles


__all__ = ["FareTracker", "Fetcher", "Presenter"]
