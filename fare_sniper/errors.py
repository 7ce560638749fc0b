"""Exception hierarchy shared by the tracker and its collaborators."""

from __future__ import annotations


class FareSniperError(RuntimeError):
    """Base class for every recoverable fare_sniper failure."""


class FetcherError(FareSniperError):
    """Scrape failed: network error, bad HTTP status or unexpected markup."""


class NoFaresFound(FareSniperError):
    """A direction produced no price observations in this cycle."""

    def __init__(self, direction: str | None = None) -> None:
        self.direction = direction
        msg = "no fares found"
        if direction:
            msg = f"no {direction} fares found"
        super().__init__(msg)


class InvalidDelta(FareSniperError):
    """Comparison against the previous cycle gave a non-finite difference."""


class PersistenceError(FareSniperError):
    """Snapshot could not be written."""


class NotificationError(FareSniperError):
    """SMS delivery failed."""


__all__ = [
    "FareSniperError",
    "FetcherError",
    "NoFaresFound",
    "InvalidDelta",
    "PersistenceError",
    "NotificationError",
]
