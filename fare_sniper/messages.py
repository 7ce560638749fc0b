"""Human readable text for the dashboard log, SMS body and settings panel.

Colours use rich console markup.
"""

from __future__ import annotations

from typing import List, Optional

from .config import RunConfig
from .models import CycleResult, DeltaKind, FareDelta

_DELTA_STYLE = {
    DeltaKind.DECREASED: "green",
    DeltaKind.INCREASED: "red",
    DeltaKind.UNCHANGED: "blue",
}


def delta_text(delta: FareDelta) -> str:
    """``(down $50)``, ``(up $12)``, ``(no change)`` or ``""``."""
    if delta.kind is DeltaKind.DECREASED:
        return f"(down ${delta.amount})"
    if delta.kind is DeltaKind.INCREASED:
        return f"(up ${delta.amount})"
    if delta.kind is DeltaKind.UNCHANGED:
        return "(no change)"
    return ""


def delta_markup(delta: FareDelta) -> str:
    text = delta_text(delta)
    style = _DELTA_STYLE.get(delta.kind)
    if not text or not style:
        return text
    return f"[{style}]{text}[/{style}]"


def fare_lines(record: CycleResult) -> List[str]:
    """The two log lines printed for every recorded cycle."""
    out = " ".join(
        p for p in (f"${record.lowest_outbound_fare}", delta_markup(record.outbound_delta)) if p
    )
    ret = " ".join(
        p for p in (f"${record.lowest_return_fare}", delta_markup(record.return_delta)) if p
    )
    return [
        f"Lowest fare for an outbound flight is currently {out}",
        f"Lowest fare for a return flight is currently {ret}",
    ]


def deal_message(outbound: int, return_: int) -> str:
    return (
        f"Deal alert! Lowest fare has hit ${outbound} (outbound) "
        f"and ${return_} (return)"
    )


def deal_markup(outbound: int, return_: int) -> str:
    return f"[bold magenta blink]{deal_message(outbound, return_)}[/]"


def humanize_minutes(minutes: float) -> str:
    """``30`` -> ``30m``, ``90`` -> ``1h 30m``, ``0.5`` -> ``30s``."""
    total = int(round(minutes * 60))
    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if mins:
        parts.append(f"{mins}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def settings_lines(cfg: RunConfig, sms_to: Optional[str] = None) -> List[str]:
    threshold = cfg.deal_price_threshold
    return [
        f"Origin airport: {cfg.origin}",
        f"Destination airport: {cfg.destination}",
        f"Outbound date: {cfg.outbound_date}",
        f"Return date: {cfg.return_date}",
        f"Passengers: {cfg.passengers}",
        f"Interval: {humanize_minutes(cfg.interval_min)}",
        f"Deal price: {f'<= ${threshold}' if threshold is not None else 'disabled'}",
        f"SMS alerts: {sms_to or 'disabled'}",
    ]


__all__ = [
    "delta_text",
    "delta_markup",
    "fare_lines",
    "deal_message",
    "deal_markup",
    "humanize_minutes",
    "settings_lines",
]
