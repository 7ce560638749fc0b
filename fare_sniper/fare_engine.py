from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Tuple

from .errors import InvalidDelta, NoFaresFound
from .models import FareDelta

logger = logging.getLogger(__name__)

Fare = float | int


def lowest_fare(prices: Iterable[int], direction: Optional[str] = None) -> int:
    """Return the cheapest price of a batch.

    Raises ``NoFaresFound`` when the batch is empty, the cycle has to be
    abandoned for that direction.
    """
    prices = list(prices)
    if not prices:
        raise NoFaresFound(direction)
    return min(prices)


def _is_finite(value: Fare) -> bool:
    # ints too large for a float overflow instead of returning inf
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def compute_delta(previous: Optional[Fare], current: Fare) -> FareDelta:
    """Classify the move from *previous* to *current*.

    The difference is ``previous - current`` so a positive value means the
    price went down. A *current* fare that is not a finite number raises
    ``InvalidDelta`` even on the first cycle, so it never reaches the
    ledger.
    """
    if not _is_finite(current):
        raise InvalidDelta(f"non-finite fare {current!r}")
    if previous is None:
        return FareDelta.not_applicable()

    diff = previous - current
    if not _is_finite(diff):
        raise InvalidDelta(
            f"non-finite fare difference ({previous!r} -> {current!r})"
        )
    if diff > 0:
        return FareDelta.decreased(int(diff))
    if diff < 0:
        return FareDelta.increased(int(-diff))
    return FareDelta.unchanged()


def compute_deltas(
    previous: Tuple[Optional[Fare], Optional[Fare]],
    current: Tuple[Fare, Fare],
) -> Tuple[FareDelta, FareDelta]:
    """Return (outbound, return) deltas.

    Both directions are evaluated before anything is returned; an
    ``InvalidDelta`` on either side invalidates the whole cycle.
    """
    prev_out, prev_ret = previous
    cur_out, cur_ret = current
    outbound = compute_delta(prev_out, cur_out)
    return_ = compute_delta(prev_ret, cur_ret)
    return outbound, return_


def is_deal(
    threshold: Optional[int], outbound: Fare, return_: Fare
) -> bool:
    """Return ``True`` if either direction is at or below *threshold*."""
    if threshold is None:
        return False
    return outbound <= threshold or return_ <= threshold


__all__ = ["lowest_fare", "compute_delta", "compute_deltas", "is_deal"]
