"""Terminal dashboard: map, settings, price chart and log panels (rich)."""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional

from rich.console import Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .models import Direction, now_stamp

# Continental US, roughly the area the map panel covers
MAP_BOUNDS = {"lat_min": 24.0, "lat_max": 50.0, "lon_min": -125.0, "lon_max": -66.0}

BORDER_STYLE = "green"


class Dashboard:
    """
    Screen state for one tracking run.

    The tracker pushes settings, waypoints, log lines and plot points;
    ``render`` refreshes the attached ``rich.live.Live`` (if any).
    """

    def __init__(
        self,
        max_log_lines: int = 200,
        chart_height: int = 8,
        chart_points: int = 60,
    ) -> None:
        self.settings_lines: List[str] = []
        self.markers: List[Dict[str, Any]] = []
        self.log_lines: Deque[str] = deque(maxlen=max_log_lines)
        self.graphs: Dict[Direction, Dict[str, Any]] = {
            Direction.OUTBOUND: {"title": "Origin/Outbound", "x": [], "y": [], "style": "red"},
            Direction.RETURN: {"title": "Destination/Return", "x": [], "y": [], "style": "yellow"},
        }
        self.chart_height = chart_height
        self.chart_points = chart_points
        self._live: Optional[Live] = None

    # ------------------------------------------------------------------ #
    # Presentation contract
    # ------------------------------------------------------------------ #
    def settings(self, lines: List[str]) -> None:
        self.settings_lines.extend(lines)

    def waypoint(self, marker: Dict[str, Any]) -> None:
        self.markers.append(marker)

    def log(self, messages: List[str], datetime: Optional[str] = None) -> None:
        stamp = datetime or now_stamp()
        for message in messages:
            self.log_lines.append(f"{stamp}: {message}")

    def plot(self, datetime: str, outbound: int, return_: int) -> None:
        for direction, value in ((Direction.OUTBOUND, outbound), (Direction.RETURN, return_)):
            graph = self.graphs[direction]
            graph["x"].append(datetime)
            graph["y"].append(value)

    def attach(self, live: Live) -> None:
        self._live = live

    def render(self) -> None:
        if self._live is not None:
            self._live.update(self, refresh=True)

    # ------------------------------------------------------------------ #
    # rich renderables
    # ------------------------------------------------------------------ #
    def __rich__(self) -> Layout:
        layout = Layout(name="root")
        layout.split_column(
            Layout(name="top", ratio=5),
            Layout(name="graph", ratio=4),
            Layout(name="log", ratio=3),
        )
        layout["top"].split_row(
            Layout(name="map", ratio=3),
            Layout(name="settings", ratio=1),
        )
        layout["map"].update(Panel(self._map(), title="Map", border_style=BORDER_STYLE))
        layout["settings"].update(
            Panel(
                Text("\n".join(self.settings_lines), style="blue"),
                title="Settings",
                border_style=BORDER_STYLE,
            )
        )
        layout["graph"].update(Panel(self._chart(), title="Prices", border_style=BORDER_STYLE))
        layout["log"].update(Panel(self._log(), title="Log", border_style=BORDER_STYLE))
        return layout

    def _map(self, width: int = 60, height: int = 12) -> Group:
        grid = [[" "] * width for _ in range(height)]
        styles: Dict[tuple, str] = {}
        b = MAP_BOUNDS
        for m in self.markers:
            col = int((m["lon"] - b["lon_min"]) / (b["lon_max"] - b["lon_min"]) * (width - 1))
            row = int((b["lat_max"] - m["lat"]) / (b["lat_max"] - b["lat_min"]) * (height - 1))
            if 0 <= row < height and 0 <= col < width:
                grid[row][col] = m.get("char", "X")
                styles[(row, col)] = m.get("color", "white")

        text = Text()
        for r, line in enumerate(grid):
            for c, ch in enumerate(line):
                text.append(ch, style=styles.get((r, c), "dim"))
            text.append("\n")
        legend = Text()
        for m in self.markers:
            legend.append(
                f"{m.get('char', 'X')} {m.get('code', '?')} ({m['lat']:.2f}, {m['lon']:.2f})  ",
                style=m.get("color", "white"),
            )
        return Group(text, legend)

    def _chart(self) -> Text:
        series = {
            d: g["y"][-self.chart_points:] for d, g in self.graphs.items()
        }
        values = [v for ys in series.values() for v in ys]
        text = Text()
        if not values:
            text.append("waiting for the first fares...", style="dim")
            return text

        lo, hi = min(values), max(values)
        span = (hi - lo) or 1
        height = self.chart_height
        width = max(len(ys) for ys in series.values())
        cells: Dict[tuple, str] = {}
        for direction, ys in series.items():
            for col, y in enumerate(ys):
                row = height - 1 - int(round((y - lo) / span * (height - 1)))
                key = (row, col)
                cells[key] = "white" if key in cells else self.graphs[direction]["style"]

        label_w = len(str(hi)) + 2
        for row in range(height):
            if row == 0:
                label = f"${hi}"
            elif row == height - 1:
                label = f"${lo}"
            else:
                label = ""
            text.append(label.rjust(label_w) + " │", style="blue")
            for col in range(width):
                style = cells.get((row, col))
                text.append("•" if style else " ", style=style or "")
            text.append("\n")

        for direction, graph in self.graphs.items():
            last = graph["y"][-1] if graph["y"] else "-"
            text.append(f"  ━ {graph['title']} (${last})", style=graph["style"])
        return text

    def _log(self) -> Text:
        text = Text()
        for line in list(self.log_lines)[-50:]:
            text.append_text(Text.from_markup(line))
            text.append("\n")
        return text


__all__ = ["Dashboard", "MAP_BOUNDS"]
