from pykeeper.engine import DeltaStatus, apply_report, recalculate_all

from tests.helpers import at, drafted, intent, make_snapshot, traded


def _league(keepers):
    events = [
        drafted("p1", "A", 2023, 4),
        drafted("p2", "A", 2024, 6),
        drafted("p3", "B", 2024, 8),
        drafted("p4", "B", 2024, 8),
        drafted("p9", "C", 2024, 2),
        *traded("p9", "C", "B", at(2024, 10, 20)),
    ]
    return make_snapshot(season=2025, events=events, rosters={"A": [], "B": [], "C": []}, keepers=keepers)


def test_recalculation_reports_stale_costs():
    snapshot = _league(
        [
            intent("p1", "A", 2025, base_cost=4, final_cost=4, keeper_type="FRANCHISE"),
            intent("p2", "A", 2025, base_cost=6, final_cost=5, years_held=1),
        ]
    )
    report = recalculate_all(snapshot)

    assert report.season == 2025
    by_player = {entry.player_id: entry for entry in report.entries}
    assert by_player["p1"].status is DeltaStatus.UPDATED
    assert by_player["p1"].old_cost == 4
    assert by_player["p1"].new_cost == 2
    assert by_player["p1"].years_held == 2
    assert by_player["p2"].status is DeltaStatus.UNCHANGED


def test_recalculation_is_stable_after_apply():
    snapshot = _league(
        [
            intent("p1", "A", 2025, base_cost=4, final_cost=4, keeper_type="FRANCHISE"),
            intent("p3", "B", 2025, base_cost=8, final_cost=8),
            intent("p4", "B", 2025, base_cost=8, final_cost=8),
        ]
    )
    first = recalculate_all(snapshot)
    assert first.updated

    applied = apply_report(snapshot, first)
    second = recalculate_all(applied)
    assert second.updated == ()
    assert len(second.unchanged) == 3
    assert {(item.player_id, item.final_cost) for item in applied.keepers_for("B")} == {("p3", 7), ("p4", 8)}


def test_failing_roster_does_not_block_others():
    snapshot = _league(
        [
            # Held two seasons as a regular keeper: rejected for roster A only.
            intent("p1", "A", 2025, base_cost=4, final_cost=2, years_held=2),
            intent("p9", "B", 2025, base_cost=2, final_cost=3),
        ]
    )
    report = recalculate_all(snapshot)

    assert [entry.player_id for entry in report.failed] == ["p1"]
    assert "franchise tag" in (report.failed[0].error or "")
    assert [entry.player_id for entry in report.updated] == ["p9"]
    assert report.updated[0].new_cost == 1


def test_other_seasons_are_left_alone():
    snapshot = _league([intent("p2", "A", 2024, base_cost=6, final_cost=6)])
    report = recalculate_all(snapshot)
    assert report.entries == ()
    assert apply_report(snapshot, report) == snapshot
