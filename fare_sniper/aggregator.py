from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd

from .models import DATETIME_FORMAT, CycleResult, Direction

logger = logging.getLogger(__name__)

COLUMNS = ["datetime", "outbound", "return", "is_deal"]


def records_frame(records: Iterable[CycleResult]) -> pd.DataFrame:
    """One row per recorded cycle, ``datetime`` parsed to timestamps."""
    rows = [
        {
            "datetime": r.datetime,
            "outbound": r.lowest_outbound_fare,
            "return": r.lowest_return_fare,
            "is_deal": r.is_deal,
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=COLUMNS)

    df = pd.DataFrame(rows, columns=COLUMNS)
    df["datetime"] = pd.to_datetime(
        df["datetime"], format=DATETIME_FORMAT, errors="coerce"
    )
    bad = df["datetime"].isna().sum()
    if bad:
        logger.warning("Dropping %d records with unparseable timestamps", bad)
        df = df.dropna(subset=["datetime"])
    return df.sort_values("datetime").reset_index(drop=True)


def daily_summary(records: Iterable[CycleResult]) -> pd.DataFrame:
    """Compute the lowest fares per calendar day.

    Columns: ``day``, ``min_outbound``, ``min_return``, ``cycles``,
    ``deals``.
    """
    df = records_frame(records)
    if df.empty:
        return pd.DataFrame(
            columns=["day", "min_outbound", "min_return", "cycles", "deals"]
        )

    df["day"] = df["datetime"].dt.normalize()
    summary = (
        df.groupby("day", as_index=False)
        .agg(
            min_outbound=("outbound", "min"),
            min_return=("return", "min"),
            cycles=("outbound", "size"),
            deals=("is_deal", "sum"),
        )
        .sort_values("day")
        .reset_index(drop=True)
    )
    summary["deals"] = summary["deals"].astype(int)
    return summary


def overall_lowest(
    records: Iterable[CycleResult], direction: Direction
) -> Optional[tuple[int, str]]:
    """Return ``(fare, datetime)`` of the cheapest cycle for *direction*."""
    df = records_frame(records)
    if df.empty:
        return None
    col = direction.value
    row = df.loc[df[col].idxmin()]
    return int(row[col]), row["datetime"].strftime(DATETIME_FORMAT)


__all__ = ["records_frame", "daily_summary", "overall_lowest"]
