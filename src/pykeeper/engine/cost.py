"""Keeper cost rules: years-held reduction and franchise tag escalation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pykeeper.config import KeeperSettings
from pykeeper.models import KeeperType

from .origin import Origin


@dataclass(frozen=True)
class CostOption:
    base_cost: int
    final_cost: int
    eligible: bool = True
    reason: str = ""


@dataclass(frozen=True)
class KeeperCost:
    season: int
    years_held: int
    regular: CostOption
    franchise: CostOption
    must_franchise_tag: bool

    def option(self, keeper_type: KeeperType) -> CostOption:
        if keeper_type is KeeperType.REGULAR:
            return self.regular
        if keeper_type is KeeperType.FRANCHISE:
            return self.franchise
        raise ValueError(f"Unhandled keeper type {keeper_type!r}")


def reduced_round(base_round: int, years_held: int, settings: KeeperSettings) -> int:
    return max(settings.minimum_round, base_round - years_held * settings.cost_reduction_per_year)


def compute_cost(origin: Origin, current_season: int, settings: KeeperSettings) -> KeeperCost:
    years_held = max(0, current_season - origin.origin_season)
    final_cost = reduced_round(origin.base_round, years_held, settings)
    must_franchise_tag = years_held >= settings.regular_keeper_max_years
    breakdown = (
        f"Round {origin.base_round} - {years_held} x {settings.cost_reduction_per_year} "
        f"= Round {final_cost}"
    )

    if must_franchise_tag:
        regular = CostOption(
            base_cost=origin.base_round,
            final_cost=final_cost,
            eligible=False,
            reason=(
                f"Held {years_held} seasons (max {settings.regular_keeper_max_years}); "
                "franchise tag required"
            ),
        )
    else:
        regular = CostOption(base_cost=origin.base_round, final_cost=final_cost, reason=breakdown)

    franchise = CostOption(base_cost=origin.base_round, final_cost=final_cost, reason=breakdown)
    return KeeperCost(
        season=current_season,
        years_held=years_held,
        regular=regular,
        franchise=franchise,
        must_franchise_tag=must_franchise_tag,
    )


def project_costs(
    origin: Origin,
    from_season: int,
    years: int,
    settings: KeeperSettings,
) -> Tuple[KeeperCost, ...]:
    """Cost trajectory for ``years`` consecutive seasons starting at ``from_season``."""

    return tuple(compute_cost(origin, from_season + offset, settings) for offset in range(max(0, years)))
