import pytest

from pykeeper.config import KeeperSettings
from pykeeper.engine import Origin, OriginSource, compute_cost, project_costs
from pykeeper.models import KeeperType


SETTINGS = KeeperSettings()


def _drafted(season: int, round_no: int) -> Origin:
    return Origin(origin_season=season, base_round=round_no, source=OriginSource.DRAFTED)


def test_round_four_pick_gets_cheaper_each_season():
    origin = _drafted(2023, 4)
    costs = {season: compute_cost(origin, season, SETTINGS) for season in (2024, 2025, 2026)}

    assert costs[2024].regular.final_cost == 3
    assert costs[2025].regular.final_cost == 2
    assert costs[2026].regular.final_cost == 1
    assert costs[2024].regular.base_cost == 4
    assert not costs[2024].must_franchise_tag
    assert costs[2026].must_franchise_tag


def test_regular_option_ineligible_once_franchise_tag_required():
    cost = compute_cost(_drafted(2023, 4), 2026, SETTINGS)
    assert not cost.regular.eligible
    assert "franchise" in cost.regular.reason
    assert cost.franchise.eligible
    assert cost.franchise.final_cost == 1
    assert cost.option(KeeperType.FRANCHISE) is cost.franchise


def test_cost_never_drops_below_minimum_round():
    settings = KeeperSettings(minimum_round=2)
    cost = compute_cost(_drafted(2015, 3), 2025, settings)
    assert cost.years_held == 10
    assert cost.regular.final_cost == 2


def test_cost_in_origin_season_is_base_round():
    cost = compute_cost(_drafted(2025, 9), 2025, SETTINGS)
    assert cost.years_held == 0
    assert cost.regular.final_cost == 9
    assert cost.regular.eligible


def test_years_held_never_negative():
    cost = compute_cost(_drafted(2026, 5), 2025, SETTINGS)
    assert cost.years_held == 0
    assert cost.regular.final_cost == 5


def test_zero_reduction_keeps_base_round():
    settings = KeeperSettings(cost_reduction_per_year=0, regular_keeper_max_years=5)
    cost = compute_cost(_drafted(2022, 6), 2025, settings)
    assert cost.regular.final_cost == 6


@pytest.mark.parametrize("years", [0, 1, 3])
def test_project_costs_length(years: int):
    projections = project_costs(_drafted(2023, 4), 2024, years, SETTINGS)
    assert len(projections) == years
    assert [cost.season for cost in projections] == list(range(2024, 2024 + years))


def test_project_costs_trajectory_is_non_increasing():
    projections = project_costs(_drafted(2020, 12), 2021, 6, SETTINGS)
    rounds = [cost.regular.final_cost for cost in projections]
    assert rounds == sorted(rounds, reverse=True)
    assert rounds[0] == 11
