import json

import pytest

from pykeeper.cli import _parse_keep, _parse_mapping, main
from pykeeper.ingest import dump_snapshot, load_snapshot
from pykeeper.models import KeeperType

from tests.helpers import drafted, intent, make_snapshot


@pytest.fixture()
def snapshot_path(tmp_path):
    snapshot = make_snapshot(
        events=[
            drafted("p-a", "A", 2024, 6),
            drafted("p-b", "A", 2024, 6),
            drafted("p-c", "A", 2023, 4),
        ],
        rosters={"A": ["p-a", "p-b", "p-c"], "B": []},
        keepers=[intent("p-c", "A", 2025, base_cost=4, final_cost=4, keeper_type="FRANCHISE")],
    )
    path = tmp_path / "snapshot.json"
    dump_snapshot(snapshot, path)
    return path


def test_parse_helpers():
    assert _parse_mapping(["max_keepers=5", " minimum_round = 2 "]) == {"max_keepers": "5", "minimum_round": "2"}
    with pytest.raises(ValueError):
        _parse_mapping(["max_keepers"])
    assert _parse_keep("p1=franchise").keeper_type is KeeperType.FRANCHISE
    assert _parse_keep("p1").keeper_type is KeeperType.REGULAR


def test_quote_command_writes_report(snapshot_path, tmp_path, capsys):
    report = tmp_path / "quote.json"
    code = main(
        ["quote", str(snapshot_path), "--player", "p-a", "--roster", "A", "--years", "2", "--report", str(report)]
    )
    assert code == 0
    assert "origin 2024 round 6" in capsys.readouterr().out

    data = json.loads(report.read_text())
    assert data["cost"]["regular"]["final_cost"] == 5
    assert [item["season"] for item in data["projections"]] == [2025, 2026]
    assert data["projections"][1]["must_franchise_tag"] is True


def test_simulate_command_layers_persisted_keepers(snapshot_path, tmp_path):
    report = tmp_path / "simulate.json"
    code = main(
        [
            "simulate",
            str(snapshot_path),
            "--roster",
            "A",
            "--keep",
            "p-a",
            "--keep",
            "p-b",
            "--report",
            str(report),
        ]
    )
    assert code == 0
    data = json.loads(report.read_text())
    assert {keeper["player_id"]: keeper["final_cost"] for keeper in data["keepers"]} == {
        "p-a": 5,
        "p-b": 6,
        "p-c": 2,
    }
    assert data["total_slots_taken"] == 3


def test_simulate_command_reports_rule_violation(snapshot_path, capsys):
    code = main(["simulate", str(snapshot_path), "--roster", "A", "--ignore-persisted", "--keep", "p-c"])
    assert code == 1
    assert "franchise tag" in capsys.readouterr().err


def test_preset_and_overrides_change_rules(snapshot_path, tmp_path, capsys):
    profile = tmp_path / "profile.json"
    code = main(
        [
            "simulate",
            str(snapshot_path),
            "--roster",
            "A",
            "--drop",
            "p-c",
            "--keep",
            "p-a",
            "--preset",
            "strict",
            "--save-profile",
            str(profile),
        ]
    )
    # strict allows one regular season: a player held one year needs the tag.
    assert code == 1
    assert json.loads(profile.read_text())["preset"] == "strict"

    code = main(
        [
            "simulate",
            str(snapshot_path),
            "--roster",
            "A",
            "--drop",
            "p-c",
            "--keep",
            "p-a",
            "--load-profile",
            str(profile),
            "--setting",
            "regular_keeper_max_years=2",
        ]
    )
    assert code == 0
    assert "round 6: p-a" in capsys.readouterr().out


def test_recalculate_command_writes_updated_snapshot(snapshot_path, tmp_path):
    output = tmp_path / "updated.json"
    code = main(["recalculate", str(snapshot_path), "--output", str(output)])
    assert code == 0

    updated = load_snapshot(output)
    assert [(item.player_id, item.final_cost, item.years_held) for item in updated.keepers] == [("p-c", 2, 2)]


def test_transactions_are_appended(snapshot_path, tmp_path, capsys):
    transactions = tmp_path / "tx.csv"
    transactions.write_text(
        "player_id,roster_id,kind,timestamp\n"
        "p-z,B,FA,2024-10-01T00:00:00Z\n"
        "p-y,B,teleport,2024-10-01T00:00:00Z\n",
        encoding="utf-8",
    )
    code = main(["quote", str(snapshot_path), "--transactions", str(transactions), "--player", "p-z", "--roster", "B"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Imported 1/2 transactions" in out
    assert "origin 2024 round 10 [UNDRAFTED]" in out
