import itertools

import pytest

from pykeeper.config import KeeperSettings
from pykeeper.engine import SlotRequest, owned_rounds_for, resolve_slots, validate_limits
from pykeeper.errors import DuplicateKeeperError, KeeperLimitError, UnresolvableCascadeError
from pykeeper.models import DraftPickOwnership, KeeperType


SETTINGS = KeeperSettings()
ALL_ROUNDS = tuple(range(1, 17))


def _regular(player_id: str, round_no: int, years: int = 0) -> SlotRequest:
    return SlotRequest(player_id=player_id, keeper_type=KeeperType.REGULAR, requested_round=round_no, years_held=years)


def _franchise(player_id: str, round_no: int, years: int = 0) -> SlotRequest:
    return SlotRequest(player_id=player_id, keeper_type=KeeperType.FRANCHISE, requested_round=round_no, years_held=years)


def _assigned(results) -> dict[str, int]:
    return {result.player_id: result.assigned_round for result in results}


def test_collision_cascades_to_next_round():
    results = resolve_slots("A", [_regular("p-b", 5, 1), _regular("p-a", 5, 1)], ALL_ROUNDS, SETTINGS)
    by_player = {result.player_id: result for result in results}

    assert by_player["p-a"].assigned_round == 5
    assert not by_player["p-a"].was_cascaded
    assert by_player["p-b"].assigned_round == 6
    assert by_player["p-b"].was_cascaded
    assert by_player["p-b"].reason == "round 5 occupied, moved to 6"


def test_seniority_wins_ties():
    results = resolve_slots("A", [_regular("p-a", 5, 0), _regular("p-z", 5, 2)], ALL_ROUNDS, SETTINGS)
    assert _assigned(results) == {"p-z": 5, "p-a": 6}


def test_franchise_tag_claims_tied_round_first():
    results = resolve_slots("A", [_regular("p-a", 3, 2), _franchise("p-z", 3)], ALL_ROUNDS, SETTINGS)
    assert _assigned(results) == {"p-z": 3, "p-a": 4}


def test_regular_cascade_never_displaces_franchise_tag():
    requests = [_regular("r1", 4), _regular("r2", 4), _franchise("f1", 5)]
    results = {result.player_id: result for result in resolve_slots("A", requests, ALL_ROUNDS, SETTINGS)}

    assert results["f1"].assigned_round == 5
    assert not results["f1"].was_cascaded
    assert results["r1"].assigned_round == 4
    assert results["r2"].assigned_round == 6
    assert results["r2"].reason == "round 4 occupied, moved to 6"


def test_franchise_tags_cascade_among_themselves():
    requests = [_franchise("f1", 5, 2), _franchise("f2", 5), _regular("r1", 6)]
    assert _assigned(resolve_slots("A", requests, ALL_ROUNDS, SETTINGS)) == {"f1": 5, "f2": 6, "r1": 7}


def test_traded_away_round_is_skipped():
    owned = tuple(round_no for round_no in ALL_ROUNDS if round_no != 4)
    results = resolve_slots("A", [_regular("p1", 4)], owned, SETTINGS)
    assert results[0].assigned_round == 5
    assert results[0].reason == "round 4 not owned, moved to 5"


def test_cascade_skips_claimed_rounds():
    requests = [_regular("p1", 5), _regular("p2", 6), _regular("p3", 5)]
    assert _assigned(resolve_slots("A", requests, ALL_ROUNDS, SETTINGS)) == {"p1": 5, "p2": 6, "p3": 7}


def test_unresolvable_cascade_names_player():
    with pytest.raises(UnresolvableCascadeError) as excinfo:
        resolve_slots("A", [_regular("p1", 16), _regular("p2", 16)], ALL_ROUNDS, SETTINGS)
    assert excinfo.value.player_id == "p2"
    assert excinfo.value.requested_round == 16
    assert "cannot keep this many players" in str(excinfo.value)


def test_assignment_is_independent_of_input_order():
    requests = [_regular("p1", 5, 1), _regular("p2", 5, 0), _franchise("p3", 5), _regular("p4", 6, 1)]
    expected = _assigned(resolve_slots("A", requests, ALL_ROUNDS, SETTINGS))
    for permutation in itertools.permutations(requests):
        assert _assigned(resolve_slots("A", list(permutation), ALL_ROUNDS, SETTINGS)) == expected


def test_assigned_rounds_are_distinct_owned_and_not_earlier():
    owned = (1, 2, 3, 5, 8, 9, 12)
    requests = [_regular("p1", 2), _regular("p2", 2), _regular("p3", 4), _franchise("p4", 8)]
    results = resolve_slots("A", requests, owned, SETTINGS)
    assigned = [result.assigned_round for result in results]
    assert len(set(assigned)) == len(assigned)
    assert set(assigned) <= set(owned)
    assert all(result.assigned_round >= result.requested_round for result in results)


def test_requests_below_minimum_round_move_up():
    settings = KeeperSettings(minimum_round=3)
    results = resolve_slots("A", [_regular("p1", 2)], ALL_ROUNDS, settings)
    assert results[0].assigned_round == 3
    assert results[0].was_cascaded


def test_limit_max_keepers():
    settings = KeeperSettings(max_keepers=2)
    with pytest.raises(KeeperLimitError) as excinfo:
        resolve_slots("A", [_regular("p1", 3), _regular("p2", 4), _franchise("p3", 5)], ALL_ROUNDS, settings)
    assert excinfo.value.limit == "max_keepers"
    assert excinfo.value.allowed == 2
    assert excinfo.value.requested == 3


def test_limit_franchise_tags():
    with pytest.raises(KeeperLimitError) as excinfo:
        validate_limits("A", [_franchise("p1", 3), _franchise("p2", 4), _franchise("p3", 5)], SETTINGS)
    assert excinfo.value.limit == "max_franchise_tags"


def test_limit_regular_keepers():
    requests = [_regular(f"p{index}", index + 1) for index in range(6)]
    with pytest.raises(KeeperLimitError) as excinfo:
        validate_limits("A", requests, SETTINGS)
    assert excinfo.value.limit == "max_regular_keepers"


def test_duplicate_player_rejected():
    with pytest.raises(DuplicateKeeperError):
        validate_limits("A", [_regular("p1", 3), _franchise("p1", 3)], SETTINGS)


def test_owned_rounds_reflect_traded_picks():
    picks = [
        DraftPickOwnership(season=2025, round=4, original_owner_roster_id="A", current_owner_roster_id="B"),
        DraftPickOwnership(season=2025, round=7, original_owner_roster_id="C", current_owner_roster_id="A"),
        DraftPickOwnership(season=2026, round=2, original_owner_roster_id="A", current_owner_roster_id="B"),
    ]
    owned = owned_rounds_for("A", 2025, 16, picks)
    assert 4 not in owned
    assert 7 in owned
    assert 2 in owned
    assert owned_rounds_for("B", 2025, 16, picks) == ALL_ROUNDS
