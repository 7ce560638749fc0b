from fare_sniper import aggregator
from fare_sniper.models import CycleResult, Direction, FareDelta


def make_record(out, ret, stamp, deal=False):
    na = FareDelta.not_applicable()
    return CycleResult(out, ret, na, na, deal, stamp)


RECORDS = [
    make_record(300, 310, "10/16/26-08:00:00"),
    make_record(250, 320, "10/16/26-20:00:00", deal=True),
    make_record(270, 290, "10/17/26-08:00:00"),
]


def test_records_frame_parses_timestamps():
    df = aggregator.records_frame(RECORDS)
    assert list(df.columns) == aggregator.COLUMNS
    assert len(df) == 3
    assert df["datetime"].iloc[0].hour == 8


def test_daily_summary():
    df = aggregator.daily_summary(RECORDS)
    assert len(df) == 2
    first, second = df.iloc[0], df.iloc[1]
    assert first["min_outbound"] == 250
    assert first["min_return"] == 310
    assert first["cycles"] == 2
    assert first["deals"] == 1
    assert second["min_return"] == 290
    assert second["deals"] == 0


def test_daily_summary_empty():
    assert aggregator.daily_summary([]).empty


def test_bad_timestamps_are_dropped():
    df = aggregator.records_frame(RECORDS + [make_record(1, 1, "yesterday")])
    assert len(df) == 3


def test_overall_lowest():
    assert aggregator.overall_lowest(RECORDS, Direction.OUTBOUND) == (
        250,
        "10/16/26-20:00:00",
    )
    assert aggregator.overall_lowest(RECORDS, Direction.RETURN) == (
        290,
        "10/17/26-08:00:00",
    )
    assert aggregator.overall_lowest([], Direction.RETURN) is None
