import json
from datetime import datetime, timezone

import pytest

from pykeeper.config import KeeperSettings, get_settings
from pykeeper.ingest import (
    DEFAULT_TRANSACTION_MAPPING,
    dump_snapshot,
    load_events_from_csv,
    load_snapshot,
    load_transaction_csv,
    with_process_defaults,
)
from pykeeper.models import EventKind, LeagueSnapshot

from tests.helpers import drafted, intent, make_snapshot


def _write(tmp_path, text: str):
    path = tmp_path / "transactions.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_transaction_csv_to_events(tmp_path):
    path = _write(
        tmp_path,
        "player_id,roster_id,kind,timestamp,round,season,counterparty_roster_id\n"
        "p1,A,Draft,2023-08-25T18:00:00Z,Round 4,2023,\n"
        "p1,A,trade out,2024-02-10,,,B\n"
        "p1,B,Trade,1707566400000,,,A\n"
        "p2,B,FA,2024-10-05T12:00:00,,,\n"
        "p3,B,waiver,1728129600,7,,\n",
    )
    report = load_events_from_csv(path)

    assert report.rows_read == 5
    assert report.skipped == []
    kinds = [event.kind for event in report.events]
    assert kinds == [
        EventKind.DRAFTED,
        EventKind.TRADED_OUT,
        EventKind.TRADED_IN,
        EventKind.FREE_AGENT_ADD,
        EventKind.WAIVER_ADD,
    ]

    draft = report.events[0]
    assert draft.round == 4
    assert draft.season == 2023
    assert draft.timestamp == datetime(2023, 8, 25, 18, 0, tzinfo=timezone.utc)

    trade_in = report.events[2]
    assert trade_in.timestamp == datetime(2024, 2, 10, 12, 0, tzinfo=timezone.utc)
    assert trade_in.counterparty_roster_id == "A"

    assert report.events[1].timestamp.tzinfo is not None
    assert report.events[3].timestamp == datetime(2024, 10, 5, 12, 0, tzinfo=timezone.utc)
    # Rounds are only kept for draft picks.
    assert report.events[4].round is None


def test_bad_rows_are_skipped(tmp_path):
    path = _write(
        tmp_path,
        "player_id,roster_id,kind,timestamp\n"
        "p1,A,DRAFT,2023-08-25\n"
        ",A,DROP,2023-09-01\n"
        "p2,A,kidnapped,2023-09-01\n"
        "p3,A,DROP,yesterday\n",
    )
    report = load_events_from_csv(path)

    assert report.rows_read == 4
    assert [event.player_id for event in report.events] == ["p1"]
    assert [row for row, _ in report.skipped] == [2, 3, 4]
    assert "missing player_id" in report.skipped[0][1]
    assert "unknown transaction kind" in report.skipped[1][1]
    assert "not ISO-8601" in report.skipped[2][1]


def test_custom_column_mapping(tmp_path):
    path = _write(
        tmp_path,
        "Player,Team,Type,When\n"
        "p9,C,Free Agent,2024-11-02T00:00:00+00:00\n",
    )
    mapping = {
        **DEFAULT_TRANSACTION_MAPPING,
        "player_id": "Player",
        "roster_id": "Team",
        "kind": "Type",
        "timestamp": "When",
    }
    rows = load_transaction_csv(path, mapping=mapping)
    assert rows[0].raw_player_id == "p9"
    assert rows[0].raw_round is None

    report = load_events_from_csv(path, mapping=mapping)
    assert report.events[0].kind is EventKind.FREE_AGENT_ADD
    assert report.events[0].roster_id == "C"


def test_snapshot_file_round_trip(tmp_path):
    snapshot = make_snapshot(
        events=[drafted("p1", "A", 2023, 4)],
        keepers=[intent("p1", "A", 2025, base_cost=4, final_cost=2, years_held=2, keeper_type="FRANCHISE")],
    )
    path = tmp_path / "snapshot.json"
    dump_snapshot(snapshot, path)
    assert load_snapshot(path) == snapshot


def test_load_snapshot_appends_events_and_overrides_settings(tmp_path):
    path = tmp_path / "snapshot.json"
    dump_snapshot(make_snapshot(events=[drafted("p1", "A", 2023, 4)]), path)

    extra = drafted("p2", "B", 2024, 9)
    loaded = load_snapshot(path, settings=get_settings("strict"), extra_events=[extra])
    assert [event.player_id for event in loaded.events] == ["p1", "p2"]
    assert loaded.settings.max_keepers == 3


def test_environment_defaults_apply_only_when_settings_are_missing(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PYKEEPER_MAX_KEEPERS", "3")

    bare = LeagueSnapshot(league_id="league-1", season=2025)
    assert bare.settings == KeeperSettings()
    assert with_process_defaults(bare).settings.max_keepers == 3

    explicit = make_snapshot(settings=KeeperSettings(max_keepers=6))
    assert with_process_defaults(explicit).settings.max_keepers == 6

    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"league_id": "league-1", "season": 2025}), encoding="utf-8")
    assert load_snapshot(path).settings.max_keepers == 3
