"""In-memory fare history plus its JSON snapshot on disk.

Snapshot layout::

    {
      "origin": "DAL", "destination": "HOU", ...RunConfig fields...,
      "lowest_fares": [
        {"lowest_outbound_fare": 250, "outbound_delta": {...},
         "outbound_delta_text": "(down $50)", ..., "datetime": "...",
         "is_deal": false},
        ...
      ]
    }
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from .config import RunConfig
from .errors import PersistenceError
from .messages import delta_text
from .models import CycleResult, Direction, FareDelta

logger = logging.getLogger(__name__)


class FareLedger:
    """Append-only, insertion ordered history of recorded cycles."""

    def __init__(self, records: Optional[List[CycleResult]] = None) -> None:
        self._records: List[CycleResult] = list(records or [])

    def append(self, record: CycleResult) -> None:
        self._records.append(record)

    @property
    def records(self) -> Tuple[CycleResult, ...]:
        return tuple(self._records)

    def last_lowest(self, direction: Direction) -> Optional[int]:
        """Lowest fare of the most recent record, ``None`` if empty."""
        if not self._records:
            return None
        return self._records[-1].lowest(direction)

    def last_lowest_pair(self) -> Tuple[Optional[int], Optional[int]]:
        return (
            self.last_lowest(Direction.OUTBOUND),
            self.last_lowest(Direction.RETURN),
        )

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CycleResult]:
        return iter(self._records)


# ────────────────────────────────────────────────────────────────
# Snapshot (de)serialisation
# ────────────────────────────────────────────────────────────────


def record_to_dict(record: CycleResult) -> dict[str, Any]:
    return {
        "lowest_outbound_fare": record.lowest_outbound_fare,
        "outbound_delta": record.outbound_delta.to_dict(),
        "outbound_delta_text": delta_text(record.outbound_delta),
        "lowest_return_fare": record.lowest_return_fare,
        "return_delta": record.return_delta.to_dict(),
        "return_delta_text": delta_text(record.return_delta),
        "datetime": record.datetime,
        "is_deal": record.is_deal,
    }


def record_from_dict(data: dict[str, Any]) -> CycleResult:
    return CycleResult(
        lowest_outbound_fare=int(data["lowest_outbound_fare"]),
        lowest_return_fare=int(data["lowest_return_fare"]),
        outbound_delta=FareDelta.from_dict(data.get("outbound_delta")),
        return_delta=FareDelta.from_dict(data.get("return_delta")),
        is_deal=bool(data.get("is_deal", False)),
        datetime=str(data["datetime"]),
    )


@dataclass(slots=True)
class Snapshot:
    config: RunConfig
    records: List[CycleResult] = field(default_factory=list)


def load_snapshot(path: str) -> Optional[Snapshot]:
    """Read a snapshot; ``None`` if missing or unreadable."""
    if not Path(path).exists():
        logger.info("No snapshot at %s, starting fresh", path)
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        config = RunConfig.from_snapshot(data, snapshot_path=path)
        records = [record_from_dict(r) for r in data.get("lowest_fares", [])]
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return None

    logger.info("Loaded %d records from %s", len(records), path)
    return Snapshot(config=config, records=records)


def save_snapshot(path: str, config: RunConfig, ledger: FareLedger) -> None:
    """Write config + ledger to *path* atomically.

    Raises ``PersistenceError`` when the file cannot be written.
    """
    data = config.to_snapshot()
    data["lowest_fares"] = [record_to_dict(r) for r in ledger]

    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_name = fh.name
            json.dump(data, fh, indent=2)
        if target.exists():
            shutil.copymode(target, tmp_name)
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(f"could not write {path}: {exc}") from exc
    logger.debug("Snapshot written to %s (%d records)", path, len(ledger))


__all__ = [
    "FareLedger",
    "Snapshot",
    "load_snapshot",
    "save_snapshot",
    "record_to_dict",
    "record_from_dict",
]
