"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional

# Timestamp layout shown on the dashboard and stored in snapshots
DATETIME_FORMAT = "%m/%d/%y-%H:%M:%S"


def now_stamp(now: Optional[datetime] = None) -> str:
    """Return *now* (default: current local time) as a ledger timestamp."""
    return (now or datetime.now()).strftime(DATETIME_FORMAT)


class Direction(str, Enum):
    OUTBOUND = "outbound"
    RETURN = "return"


class DeltaKind(str, Enum):
    DECREASED = "decreased"
    INCREASED = "increased"
    UNCHANGED = "unchanged"
    NOT_APPLICABLE = "not-applicable"


@dataclass(frozen=True, slots=True)
class FareDelta:
    """Change of the lowest fare against the previous recorded cycle.

    ``amount`` is the absolute difference in whole dollars and is only
    meaningful for ``DECREASED`` and ``INCREASED``.
    """

    kind: DeltaKind
    amount: int = 0

    @classmethod
    def not_applicable(cls) -> "FareDelta":
        return cls(DeltaKind.NOT_APPLICABLE)

    @classmethod
    def unchanged(cls) -> "FareDelta":
        return cls(DeltaKind.UNCHANGED)

    @classmethod
    def decreased(cls, amount: int) -> "FareDelta":
        return cls(DeltaKind.DECREASED, amount)

    @classmethod
    def increased(cls, amount: int) -> "FareDelta":
        return cls(DeltaKind.INCREASED, amount)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "FareDelta":
        if not data:
            return cls.not_applicable()
        return cls(DeltaKind(data["kind"]), int(data.get("amount", 0)))


@dataclass(frozen=True, slots=True)
class FareObservation:
    direction: Direction
    price: int


@dataclass(slots=True)
class FareBatch:
    """Raw prices of one scrape, per direction, in page order."""

    outbound: List[int] = field(default_factory=list)
    return_: List[int] = field(default_factory=list)

    def for_direction(self, direction: Direction) -> List[int]:
        if direction is Direction.OUTBOUND:
            return self.outbound
        return self.return_

    @classmethod
    def from_observations(cls, observations: Iterable[FareObservation]) -> "FareBatch":
        batch = cls()
        for obs in observations:
            batch.for_direction(obs.direction).append(obs.price)
        return batch


@dataclass(frozen=True, slots=True)
class CycleResult:
    """One recorded cycle in the fare ledger."""

    lowest_outbound_fare: int
    lowest_return_fare: int
    outbound_delta: FareDelta
    return_delta: FareDelta
    is_deal: bool
    datetime: str

    def lowest(self, direction: Direction) -> int:
        if direction is Direction.OUTBOUND:
            return self.lowest_outbound_fare
        return self.lowest_return_fare


__all__ = [
    "DATETIME_FORMAT",
    "now_stamp",
    "Direction",
    "DeltaKind",
    "FareDelta",
    "FareObservation",
    "FareBatch",
    "CycleResult",
]
