import io
from unittest.mock import Mock

from rich.console import Console

from fare_sniper.dashboard import Dashboard
from fare_sniper.models import Direction


def render_text(dashboard: Dashboard) -> str:
    console = Console(file=io.StringIO(), width=140, height=40, color_system=None)
    console.print(dashboard)
    return console.file.getvalue()


def test_log_prefixes_timestamp():
    dashboard = Dashboard()
    dashboard.log(["first", "second"], "10/17/26-12:00:00")
    assert list(dashboard.log_lines) == [
        "10/17/26-12:00:00: first",
        "10/17/26-12:00:00: second",
    ]


def test_log_defaults_to_now():
    dashboard = Dashboard()
    dashboard.log(["hello"])
    stamp, message = dashboard.log_lines[0].split(": ", 1)
    assert message == "hello"
    assert len(stamp) == len("10/17/26-12:00:00")


def test_log_is_bounded():
    dashboard = Dashboard(max_log_lines=3)
    dashboard.log([str(i) for i in range(10)], "t")
    assert len(dashboard.log_lines) == 3


def test_plot_appends_both_series():
    dashboard = Dashboard()
    dashboard.plot("t1", 250, 299)
    dashboard.plot("t2", 240, 305)
    assert dashboard.graphs[Direction.OUTBOUND]["x"] == ["t1", "t2"]
    assert dashboard.graphs[Direction.OUTBOUND]["y"] == [250, 240]
    assert dashboard.graphs[Direction.RETURN]["y"] == [299, 305]


def test_render_updates_attached_live():
    dashboard = Dashboard()
    dashboard.render()

    live = Mock()
    dashboard.attach(live)
    dashboard.render()
    live.update.assert_called_once_with(dashboard, refresh=True)


def test_rich_layout_contains_panels():
    dashboard = Dashboard()
    dashboard.settings(["Origin airport: DAL"])
    dashboard.waypoint({"code": "DAL", "lat": 32.85, "lon": -96.85, "color": "red", "char": "X"})
    dashboard.log(["[green]Lowest fare[/green] $250"], "t1")
    dashboard.plot("t1", 250, 299)
    dashboard.plot("t2", 240, 305)

    out = render_text(dashboard)

    for title in ("Map", "Settings", "Prices", "Log"):
        assert title in out
    assert "Origin airport: DAL" in out
    assert "DAL (32.85, -96.85)" in out
    assert "t1: Lowest fare $250" in out
    assert "$305" in out


def test_empty_chart_placeholder():
    assert "waiting for the first fares" in render_text(Dashboard())
