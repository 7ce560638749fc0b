import json
import stat

import pytest

from fare_sniper.config import RunConfig
from fare_sniper.errors import PersistenceError
from fare_sniper.ledger import FareLedger, load_snapshot, save_snapshot
from fare_sniper.models import CycleResult, Direction, FareDelta


def make_record(out: int, ret: int, stamp: str = "10/17/26-09:00:00", deal=False) -> CycleResult:
    return CycleResult(
        lowest_outbound_fare=out,
        lowest_return_fare=ret,
        outbound_delta=FareDelta.not_applicable(),
        return_delta=FareDelta.decreased(5),
        is_deal=deal,
        datetime=stamp,
    )


def make_config(path: str) -> RunConfig:
    return RunConfig(
        origin="DAL",
        destination="HOU",
        outbound_date="11/01/2026",
        return_date="11/08/2026",
        passengers=2,
        deal_price_threshold=99,
        interval_min=15,
        snapshot_path=path,
    )


def test_empty_ledger_has_no_previous_fare():
    ledger = FareLedger()
    assert len(ledger) == 0
    assert ledger.last_lowest(Direction.OUTBOUND) is None
    assert ledger.last_lowest_pair() == (None, None)


def test_append_keeps_order_and_last_fare():
    ledger = FareLedger()
    ledger.append(make_record(300, 310))
    ledger.append(make_record(250, 299))

    assert [r.lowest_outbound_fare for r in ledger] == [300, 250]
    assert ledger.last_lowest(Direction.OUTBOUND) == 250
    assert ledger.last_lowest(Direction.RETURN) == 299
    assert isinstance(ledger.records, tuple)


def test_snapshot_round_trip(tmp_path):
    path = str(tmp_path / "history.json")
    cfg = make_config(path)
    ledger = FareLedger([make_record(300, 310), make_record(250, 299, deal=True)])

    save_snapshot(path, cfg, ledger)
    snap = load_snapshot(path)

    assert snap is not None
    assert snap.config == cfg
    assert snap.records == list(ledger.records)


def test_snapshot_stores_display_strings(tmp_path):
    path = tmp_path / "history.json"
    save_snapshot(str(path), make_config(str(path)), FareLedger([make_record(1, 2)]))

    data = json.loads(path.read_text())
    entry = data["lowest_fares"][0]
    assert data["origin"] == "DAL"
    assert "snapshot_path" not in data
    assert entry["outbound_delta_text"] == ""
    assert entry["return_delta_text"] == "(down $5)"
    assert entry["return_delta"] == {"kind": "decreased", "amount": 5}


def test_save_leaves_no_temp_files(tmp_path):
    path = str(tmp_path / "history.json")
    save_snapshot(path, make_config(path), FareLedger([make_record(1, 2)]))
    save_snapshot(path, make_config(path), FareLedger([make_record(1, 2)]))

    assert [p.name for p in tmp_path.iterdir()] == ["history.json"]


def test_save_to_missing_directory_raises(tmp_path):
    path = str(tmp_path / "nope" / "history.json")
    with pytest.raises(PersistenceError):
        save_snapshot(path, make_config(path), FareLedger())


def test_load_missing_snapshot(tmp_path):
    assert load_snapshot(str(tmp_path / "missing.json")) is None


def test_load_corrupt_snapshot(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    assert load_snapshot(str(path)) is None

    path.write_text(json.dumps({"origin": "DAL", "lowest_fares": [{"datetime": "x"}]}))
    assert load_snapshot(str(path)) is None


def test_save_keeps_existing_file_mode(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{}")
    path.chmod(0o644)

    save_snapshot(str(path), make_config(str(path)), FareLedger([make_record(1, 2)]))

    assert stat.S_IMODE(path.stat().st_mode) == 0o644
    assert json.loads(path.read_text())["lowest_fares"][0]["lowest_outbound_fare"] == 1
